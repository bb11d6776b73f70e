"""glTF document model: immutable records and typed references."""

from gltfcore.model.reference import Index, Target
from gltfcore.model.document import (
    Accessor,
    AlphaMode,
    Animation,
    Asset,
    AttributeType,
    Buffer,
    BufferTarget,
    BufferView,
    Camera,
    CameraType,
    ComponentType,
    Document,
    Image,
    MagFilter,
    Material,
    Mesh,
    MinFilter,
    Node,
    OrthographicProjection,
    PBRMetallicRoughness,
    PerspectiveProjection,
    Primitive,
    PrimitiveMode,
    Sampler,
    Scene,
    Skin,
    Texture,
    TextureInfo,
    Wrap,
)

__all__ = [
    "Index",
    "Target",
    "Accessor",
    "AlphaMode",
    "Animation",
    "Asset",
    "AttributeType",
    "Buffer",
    "BufferTarget",
    "BufferView",
    "Camera",
    "CameraType",
    "ComponentType",
    "Document",
    "Image",
    "MagFilter",
    "Material",
    "Mesh",
    "MinFilter",
    "Node",
    "OrthographicProjection",
    "PBRMetallicRoughness",
    "PerspectiveProjection",
    "Primitive",
    "PrimitiveMode",
    "Sampler",
    "Scene",
    "Skin",
    "Texture",
    "TextureInfo",
    "Wrap",
]
