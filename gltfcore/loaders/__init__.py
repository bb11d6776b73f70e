"""Loading glTF assets: GLB scanning, byte resolution, accessor decoding."""

from gltfcore.loaders.glb_scanner import GLB, Chunk, ChunkType, GLBHeader, GLBScanner, scan_glb
from gltfcore.loaders.io_provider import FileIOProvider, IOProvider
from gltfcore.loaders.load_spec import LoadSpec
from gltfcore.loaders.asset_loader import (
    AssetLoader,
    BinaryContainer,
    ContainerKind,
    JsonContainer,
)
from gltfcore.loaders.accessor_codec import BoundsViolation, decode_accessor, element_size
from gltfcore.loaders.scene_walk import (
    default_scene,
    node_local_matrix,
    read_attribute,
    read_indices,
    walk_nodes,
    walk_scene,
)

__all__ = [
    "GLB",
    "Chunk",
    "ChunkType",
    "GLBHeader",
    "GLBScanner",
    "scan_glb",
    "FileIOProvider",
    "IOProvider",
    "LoadSpec",
    "AssetLoader",
    "BinaryContainer",
    "ContainerKind",
    "JsonContainer",
    "BoundsViolation",
    "decode_accessor",
    "element_size",
    "default_scene",
    "node_local_matrix",
    "read_attribute",
    "read_indices",
    "walk_nodes",
    "walk_scene",
]
