# gltfcore/loaders/scene_walk.py
"""Scene traversal and primitive helpers built on reference resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator, Optional, Set, Tuple

import numpy as np

from gltfcore import log
from gltfcore.loaders.accessor_codec import decode_accessor
from gltfcore.model.document import Document, Node, Primitive, Scene
from gltfcore.model.reference import Index

if TYPE_CHECKING:
    from gltfcore.loaders.asset_loader import AssetLoader


def default_scene(document: Document) -> Optional[Scene]:
    """The scene named by document.scene, else the first scene."""
    if document.scene is not None:
        return document.scene.resolve(document)
    if document.scenes:
        return document.scenes[0]
    return None


def quat_to_matrix(q) -> np.ndarray:
    """Convert quaternion (x, y, z, w) to 3x3 rotation matrix."""
    x, y, z, w = q
    return np.array([
        [1 - 2*y*y - 2*z*z, 2*x*y - 2*z*w, 2*x*z + 2*y*w],
        [2*x*y + 2*z*w, 1 - 2*x*x - 2*z*z, 2*y*z - 2*x*w],
        [2*x*z - 2*y*w, 2*y*z + 2*x*w, 1 - 2*x*x - 2*y*y],
    ], dtype=np.float32)


def node_local_matrix(node: Node) -> np.ndarray:
    """Local 4x4 transform of a node (row-major, column vectors)."""
    if node.matrix is not None:
        # Stored column-major
        return np.array(node.matrix, dtype=np.float32).reshape(4, 4).T.copy()

    matrix = np.eye(4, dtype=np.float32)
    if node.scale is not None:
        matrix[:3, :3] = np.diag(np.array(node.scale, dtype=np.float32))
    if node.rotation is not None:
        matrix[:3, :3] = quat_to_matrix(node.rotation) @ matrix[:3, :3]
    if node.translation is not None:
        matrix[:3, 3] = node.translation
    return matrix


def walk_nodes(
    document: Document,
    roots: Iterable[Index],
    parent_matrix: Optional[np.ndarray] = None,
) -> Iterator[Tuple[int, Node, np.ndarray, int]]:
    """
    Depth-first walk yielding (node_index, node, world_matrix, depth).

    Node graphs may contain cycles or shared children; every node is
    visited at most once.
    """
    if parent_matrix is None:
        parent_matrix = np.eye(4, dtype=np.float32)

    visited: Set[int] = set()
    stack = [(ref, parent_matrix, 0) for ref in reversed(list(roots))]

    while stack:
        ref, parent, depth = stack.pop()
        if ref.index in visited:
            log.warn(f"[walk_nodes] Node {ref.index} reached twice, skipping")
            continue
        node = ref.resolve(document)
        visited.add(ref.index)

        world = parent @ node_local_matrix(node)
        yield ref.index, node, world, depth

        for child in reversed(node.children):
            stack.append((child, world, depth + 1))


def walk_scene(document: Document, scene: Optional[Scene] = None):
    """walk_nodes over the roots of scene (default scene when None)."""
    if scene is None:
        scene = default_scene(document)
    if scene is None:
        return iter(())
    return walk_nodes(document, scene.nodes)


def read_attribute(
    loader: "AssetLoader", primitive: Primitive, semantic: str, diagnostics=None
) -> Optional[np.ndarray]:
    """Decode a primitive attribute (POSITION, NORMAL, TEXCOORD_0, ...)."""
    ref = primitive.attributes.get(semantic)
    if ref is None:
        return None
    return decode_accessor(ref, loader, diagnostics)


def read_indices(loader: "AssetLoader", primitive: Primitive) -> Optional[np.ndarray]:
    """Decode a primitive's index accessor as uint32, None when not indexed."""
    if primitive.indices is None:
        return None
    return decode_accessor(primitive.indices, loader).astype(np.uint32).reshape(-1)
