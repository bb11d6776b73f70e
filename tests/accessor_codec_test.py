"""Tests for accessor decoding."""

import base64
import json
import struct
import unittest

import numpy as np
import pytest

from conftest import BOX_INDICES, BOX_NORMALS, BOX_POSITIONS, CountingIOProvider
from gltfcore.errors import UnsupportedAccessorLayoutError
from gltfcore.loaders import AssetLoader, LoadSpec, decode_accessor, element_size
from gltfcore.loaders.accessor_codec import BoundsViolation
from gltfcore.model import AttributeType, ComponentType, Index, Target


def loader_for(payload: bytes, buffer_views, accessors, spec=None) -> AssetLoader:
    uri = "data:application/octet-stream;base64," + base64.b64encode(payload).decode()
    document = {
        "asset": {"version": "2.0"},
        "buffers": [{"byteLength": len(payload), "uri": uri}],
        "bufferViews": buffer_views,
        "accessors": accessors,
    }
    io = CountingIOProvider({"/m.gltf": json.dumps(document).encode("utf-8")})
    return AssetLoader.load("/m.gltf", io=io, spec=spec or LoadSpec())


def accessor(i: int) -> Index:
    return Index(Target.ACCESSORS, i)


class ElementSizeTest(unittest.TestCase):
    def test_sizes(self):
        widths = {
            ComponentType.BYTE: 1,
            ComponentType.UNSIGNED_BYTE: 1,
            ComponentType.SHORT: 2,
            ComponentType.UNSIGNED_SHORT: 2,
            ComponentType.UNSIGNED_INT: 4,
            ComponentType.FLOAT: 4,
        }
        counts = {
            AttributeType.SCALAR: 1,
            AttributeType.VEC2: 2,
            AttributeType.VEC3: 3,
            AttributeType.VEC4: 4,
            AttributeType.MAT2: 4,
            AttributeType.MAT3: 9,
            AttributeType.MAT4: 16,
        }
        for ct, width in widths.items():
            for at, n in counts.items():
                self.assertEqual(element_size(ct, at), width * n)


class FloatDecodeTest(unittest.TestCase):
    def test_two_vec3_bytes_match_source(self):
        source = struct.pack("<6f", 1.0, 2.0, 3.0, -4.5, 5.25, 1e-7)
        loader = loader_for(
            source,
            [{"buffer": 0, "byteLength": 24, "byteStride": 12}],
            [{"bufferView": 0, "byteOffset": 0, "componentType": 5126, "type": "VEC3", "count": 2}],
        )
        result = decode_accessor(accessor(0), loader)

        self.assertEqual(result.shape, (2, 3))
        self.assertEqual(result.dtype, np.float32)
        self.assertEqual(result.astype("<f4").tobytes(), source)

    def test_vec2_and_vec4(self):
        source = np.arange(12, dtype="<f4").tobytes()
        loader = loader_for(
            source,
            [{"buffer": 0, "byteLength": 48}],
            [
                {"bufferView": 0, "componentType": 5126, "type": "VEC2", "count": 6},
                {"bufferView": 0, "componentType": 5126, "type": "VEC4", "count": 3},
            ],
        )
        vec2 = decode_accessor(accessor(0), loader)
        vec4 = decode_accessor(accessor(1), loader)
        self.assertEqual(vec2.shape, (6, 2))
        self.assertEqual(vec4.shape, (3, 4))
        np.testing.assert_array_equal(vec4[2], [8, 9, 10, 11])

    def test_interleaved_stride(self):
        # position (3 floats) + uv (2 floats) per vertex, stride 20
        vertices = [(0, 1, 2, 0.25, 0.5), (3, 4, 5, 0.75, 1.0), (6, 7, 8, 0.0, 0.125)]
        source = b"".join(struct.pack("<5f", *v) for v in vertices)
        loader = loader_for(
            source,
            [{"buffer": 0, "byteLength": len(source), "byteStride": 20}],
            [
                {"bufferView": 0, "byteOffset": 0, "componentType": 5126, "type": "VEC3", "count": 3},
                {"bufferView": 0, "byteOffset": 12, "componentType": 5126, "type": "VEC2", "count": 3},
            ],
        )
        positions = decode_accessor(accessor(0), loader)
        uvs = decode_accessor(accessor(1), loader)

        np.testing.assert_array_equal(positions, [v[:3] for v in vertices])
        np.testing.assert_array_equal(uvs, [v[3:] for v in vertices])

    def test_mat4_is_row_major(self):
        # Column-major translation matrix (tx=1, ty=2, tz=3)
        columns = [1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 1, 2, 3, 1]
        loader = loader_for(
            struct.pack("<16f", *columns),
            [{"buffer": 0, "byteLength": 64}],
            [{"bufferView": 0, "componentType": 5126, "type": "MAT4", "count": 1}],
        )
        matrices = decode_accessor(accessor(0), loader)
        self.assertEqual(matrices.shape, (1, 4, 4))
        np.testing.assert_array_equal(matrices[0][:3, 3], [1, 2, 3])


class IntegerDecodeTest(unittest.TestCase):
    def test_index_scalars(self):
        for component_type, fmt in ((5121, "<4B"), (5123, "<4H"), (5125, "<4I")):
            source = struct.pack(fmt, 0, 1, 2, 250)
            loader = loader_for(
                source,
                [{"buffer": 0, "byteLength": len(source)}],
                [{"bufferView": 0, "componentType": component_type, "type": "SCALAR", "count": 4}],
            )
            indices = decode_accessor(accessor(0), loader)
            self.assertEqual(indices.dtype, np.uint32)
            self.assertEqual(indices.shape, (4,))
            np.testing.assert_array_equal(indices, [0, 1, 2, 250])

    def test_unsigned_short_vec3_widens_to_float(self):
        source = struct.pack("<6H", 1, 2, 3, 65535, 0, 7)
        loader = loader_for(
            source + b"\x00\x00\x00\x00",
            [{"buffer": 0, "byteLength": 12}],
            [{"bufferView": 0, "componentType": 5123, "type": "VEC3", "count": 2}],
        )
        result = decode_accessor(accessor(0), loader)
        self.assertEqual(result.dtype, np.float32)
        np.testing.assert_array_equal(result, [[1, 2, 3], [65535, 0, 7]])

    def test_normalized_unsigned_byte(self):
        source = bytes([0, 255, 51, 255])
        loader = loader_for(
            source,
            [{"buffer": 0, "byteLength": 4}],
            [{"bufferView": 0, "componentType": 5121, "type": "VEC2", "count": 2,
              "normalized": True}],
        )
        result = decode_accessor(accessor(0), loader)
        np.testing.assert_allclose(result, [[0.0, 1.0], [0.2, 1.0]], rtol=1e-6)

    def test_normalized_signed_short_clamps(self):
        source = struct.pack("<2h", -32768, 32767)
        loader = loader_for(
            source,
            [{"buffer": 0, "byteLength": 4}],
            [{"bufferView": 0, "componentType": 5122, "type": "SCALAR", "count": 2,
              "normalized": True}],
        )
        np.testing.assert_allclose(decode_accessor(accessor(0), loader), [-1.0, 1.0])


def test_integer_matrix_is_unsupported():
    loader = loader_for(
        bytes(16),
        [{"buffer": 0, "byteLength": 16}],
        [{"bufferView": 0, "componentType": 5121, "type": "MAT2", "count": 4}],
    )
    with pytest.raises(UnsupportedAccessorLayoutError):
        decode_accessor(accessor(0), loader)


def test_stride_smaller_than_element_is_unsupported():
    loader = loader_for(
        bytes(24),
        [{"buffer": 0, "byteLength": 24, "byteStride": 8}],
        [{"bufferView": 0, "componentType": 5126, "type": "VEC3", "count": 2}],
    )
    with pytest.raises(UnsupportedAccessorLayoutError):
        decode_accessor(accessor(0), loader)


def test_missing_buffer_view_decodes_zeros():
    loader = loader_for(b"", [], [{"componentType": 5126, "type": "VEC3", "count": 5}])
    result = decode_accessor(accessor(0), loader)
    assert result.shape == (5, 3)
    assert not result.any()


def test_zero_count():
    loader = loader_for(bytes(4), [{"buffer": 0, "byteLength": 4}],
                        [{"bufferView": 0, "componentType": 5126, "type": "VEC3", "count": 0}])
    assert decode_accessor(accessor(0), loader).shape == (0, 3)


# ============== Bounds ==============

def test_bounds_violation_is_reported_not_raised():
    source = struct.pack("<3f", 0.5, 2.0, -1.0)
    loader = loader_for(
        source,
        [{"buffer": 0, "byteLength": 12}],
        [{"bufferView": 0, "componentType": 5126, "type": "SCALAR", "count": 3,
          "min": [0.0], "max": [1.0]}],
    )
    diagnostics = []
    result = decode_accessor(accessor(0), loader, diagnostics)

    np.testing.assert_array_equal(result, [0.5, 2.0, -1.0])
    assert sorted(diagnostics, key=lambda d: d.element) == [
        BoundsViolation(None, 1, 0, 2.0, 1.0, "max"),
        BoundsViolation(None, 2, 0, -1.0, 0.0, "min"),
    ]


def test_float32_rounded_bounds_pass():
    source = struct.pack("<f", 0.1)
    loader = loader_for(
        source,
        [{"buffer": 0, "byteLength": 4}],
        [{"bufferView": 0, "componentType": 5126, "type": "SCALAR", "count": 1,
          "min": [0.1], "max": [0.1]}],
    )
    diagnostics = []
    decode_accessor(accessor(0), loader, diagnostics)
    assert diagnostics == []


def test_bounds_check_can_be_disabled():
    source = struct.pack("<f", 5.0)
    loader = loader_for(
        source,
        [{"buffer": 0, "byteLength": 4}],
        [{"bufferView": 0, "componentType": 5126, "type": "SCALAR", "count": 1, "max": [1.0]}],
        spec=LoadSpec(check_bounds=False),
    )
    diagnostics = []
    decode_accessor(accessor(0), loader, diagnostics)
    assert diagnostics == []


# ============== Box ==============

def test_box_attributes(box_glb_path):
    loader = AssetLoader.load(box_glb_path)
    primitive = loader.document.meshes[0].primitives[0]
    diagnostics = []

    positions = decode_accessor(primitive.attributes["POSITION"], loader, diagnostics)
    normals = decode_accessor(primitive.attributes["NORMAL"], loader, diagnostics)
    indices = decode_accessor(primitive.indices, loader, diagnostics)

    np.testing.assert_array_equal(positions, BOX_POSITIONS)
    np.testing.assert_array_equal(normals, BOX_NORMALS)
    np.testing.assert_array_equal(indices, BOX_INDICES)
    assert diagnostics == []
