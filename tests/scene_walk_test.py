"""Tests for scene traversal and node transforms."""

import unittest

import numpy as np

from conftest import BOX_INDICES, BOX_POSITIONS
from gltfcore.loaders import (
    AssetLoader,
    default_scene,
    node_local_matrix,
    read_attribute,
    read_indices,
    walk_nodes,
    walk_scene,
)
from gltfcore.model import Document, Index, Node, Target


def nodes_document(nodes, scenes=None, scene=None) -> Document:
    obj = {"asset": {"version": "2.0"}, "nodes": nodes}
    if scenes is not None:
        obj["scenes"] = scenes
    if scene is not None:
        obj["scene"] = scene
    return Document.from_dict(obj)


class NodeMatrixTest(unittest.TestCase):
    def test_identity_when_unset(self):
        np.testing.assert_array_equal(node_local_matrix(Node()), np.eye(4))

    def test_column_major_matrix(self):
        node = Node(matrix=(1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 5, 6, 7, 1))
        matrix = node_local_matrix(node)
        np.testing.assert_array_equal(matrix[:3, 3], [5, 6, 7])
        np.testing.assert_array_equal(matrix[3], [0, 0, 0, 1])

    def test_trs_composition(self):
        # 90 degrees around Z, then scale 2, then translate
        s = np.sqrt(0.5)
        node = Node(translation=(1.0, 2.0, 3.0), rotation=(0.0, 0.0, s, s), scale=(2.0, 2.0, 2.0))
        matrix = node_local_matrix(node)
        point = matrix @ np.array([1.0, 0.0, 0.0, 1.0])
        np.testing.assert_allclose(point[:3], [1.0, 4.0, 3.0], atol=1e-6)


class WalkTest(unittest.TestCase):
    def test_depth_first_order_and_world_matrix(self):
        document = nodes_document([
            {"children": [1, 2], "translation": [1, 0, 0]},
            {"translation": [0, 1, 0]},
            {"children": [3]},
            {"translation": [0, 0, 1]},
        ], scenes=[{"nodes": [0]}])

        visited = list(walk_scene(document))
        self.assertEqual([v[0] for v in visited], [0, 1, 2, 3])
        self.assertEqual([v[3] for v in visited], [0, 1, 1, 2])
        np.testing.assert_array_equal(visited[3][2][:3, 3], [1, 0, 1])

    def test_cycles_terminate(self):
        document = nodes_document([
            {"children": [1]},
            {"children": [0, 1]},
        ])
        visited = [v[0] for v in walk_nodes(document, [Index(Target.NODES, 0)])]
        self.assertEqual(visited, [0, 1])

    def test_default_scene(self):
        document = nodes_document([{}], scenes=[{"nodes": []}, {"nodes": [0]}], scene=1)
        self.assertEqual(default_scene(document).nodes, (Index(Target.NODES, 0),))

        document = nodes_document([{}], scenes=[{"nodes": [0]}])
        self.assertIs(default_scene(document), document.scenes[0])

        self.assertIsNone(default_scene(nodes_document([])))
        self.assertEqual(list(walk_scene(nodes_document([]))), [])


def test_read_box_primitive(box_gltf_path):
    loader = AssetLoader.load(box_gltf_path)
    primitive = loader.document.meshes[0].primitives[0]

    np.testing.assert_array_equal(read_attribute(loader, primitive, "POSITION"), BOX_POSITIONS)
    assert read_attribute(loader, primitive, "TEXCOORD_0") is None
    indices = read_indices(loader, primitive)
    assert indices.dtype == np.uint32
    np.testing.assert_array_equal(indices, BOX_INDICES)


def test_box_mesh_node_is_rotated(box_gltf_path):
    loader = AssetLoader.load(box_gltf_path)
    visited = list(walk_scene(loader.document))

    assert [v[0] for v in visited] == [0, 1]
    mesh_node = visited[1][1]
    assert mesh_node.mesh == Index(Target.MESHES, 0)
    # Root node matrix maps +Y to -Z
    np.testing.assert_allclose(visited[1][2][:3, :3] @ [0, 1, 0], [0, 0, -1], atol=1e-6)
