"""Shared fixtures: the Khronos "Box" asset built in memory, GLB packing, counting I/O."""

import json
import struct
from pathlib import Path

import numpy as np
import pytest

from gltfcore.loaders.io_provider import FileIOProvider

JSON_CHUNK = 0x4E4F534A
BIN_CHUNK = 0x004E4942


def _box_geometry():
    positions = []
    normals = []
    indices = []
    # (axis, sign) for the six faces
    for axis in range(3):
        for sign in (1.0, -1.0):
            u, v = [a for a in range(3) if a != axis]
            base = len(positions)
            for du, dv in ((-0.5, -0.5), (0.5, -0.5), (0.5, 0.5), (-0.5, 0.5)):
                p = [0.0, 0.0, 0.0]
                p[axis] = 0.5 * sign
                p[u] = du
                p[v] = dv
                positions.append(p)
                n = [0.0, 0.0, 0.0]
                n[axis] = sign
                normals.append(n)
            indices += [base, base + 1, base + 2, base, base + 2, base + 3]
    return (
        np.array(positions, dtype="<f4"),
        np.array(normals, dtype="<f4"),
        np.array(indices, dtype="<u2"),
    )


BOX_POSITIONS, BOX_NORMALS, BOX_INDICES = _box_geometry()
BOX_BIN = BOX_INDICES.tobytes() + BOX_NORMALS.tobytes() + BOX_POSITIONS.tobytes()


def box_document(uri=None):
    """glTF JSON of the Box sample; uri=None targets the GLB BIN chunk."""
    buffer = {"byteLength": len(BOX_BIN)}
    if uri is not None:
        buffer["uri"] = uri
    return {
        "asset": {"generator": "COLLADA2GLTF", "version": "2.0"},
        "scene": 0,
        "scenes": [{"nodes": [0]}],
        "nodes": [
            {"children": [1], "matrix": [1, 0, 0, 0, 0, 0, -1, 0, 0, 1, 0, 0, 0, 0, 0, 1]},
            {"mesh": 0},
        ],
        "meshes": [{
            "primitives": [{
                "attributes": {"NORMAL": 1, "POSITION": 2},
                "indices": 0,
                "mode": 4,
                "material": 0,
            }],
            "name": "Mesh",
        }],
        "accessors": [
            {"bufferView": 0, "byteOffset": 0, "componentType": 5123, "count": 36,
             "max": [23], "min": [0], "type": "SCALAR"},
            {"bufferView": 1, "byteOffset": 0, "componentType": 5126, "count": 24,
             "max": [1.0, 1.0, 1.0], "min": [-1.0, -1.0, -1.0], "type": "VEC3"},
            {"bufferView": 1, "byteOffset": 288, "componentType": 5126, "count": 24,
             "max": [0.5, 0.5, 0.5], "min": [-0.5, -0.5, -0.5], "type": "VEC3"},
        ],
        "materials": [{
            "pbrMetallicRoughness": {"baseColorFactor": [0.8, 0.0, 0.0, 1.0], "metallicFactor": 0.0},
            "name": "Red",
        }],
        "bufferViews": [
            {"buffer": 0, "byteOffset": 0, "byteLength": 72, "target": 34963},
            {"buffer": 0, "byteOffset": 72, "byteLength": 576, "byteStride": 12, "target": 34962},
        ],
        "buffers": [buffer],
    }


def _pad(data: bytes, fill: bytes) -> bytes:
    return data + fill * (-len(data) % 4)


def pack_chunk(type_code: int, content: bytes) -> bytes:
    return struct.pack("<II", len(content), type_code) + content


def pack_glb(document: dict, bin_data=None, extra_chunks=(), version=2) -> bytes:
    """Assemble a GLB container: JSON chunk, optional BIN chunk, extra chunks."""
    body = pack_chunk(JSON_CHUNK, _pad(json.dumps(document).encode("utf-8"), b" "))
    if bin_data is not None:
        body += pack_chunk(BIN_CHUNK, _pad(bin_data, b"\x00"))
    for type_code, content in extra_chunks:
        body += pack_chunk(type_code, content)
    return struct.pack("<III", 0x46546C67, version, 12 + len(body)) + body


class CountingIOProvider:
    """FileIOProvider that counts reads per location."""

    def __init__(self, files=None):
        self.files = {str(k): v for k, v in (files or {}).items()}
        self.calls = {}
        self._disk = FileIOProvider()

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def read(self, location):
        key = str(location)
        self.calls[key] = self.calls.get(key, 0) + 1
        if key in self.files:
            return self.files[key]
        if self.files:
            raise FileNotFoundError(key)
        return self._disk.read(location)


@pytest.fixture
def box_gltf_path(tmp_path: Path) -> Path:
    path = tmp_path / "Box.gltf"
    path.write_text(json.dumps(box_document(uri="Box0.bin")), encoding="utf-8")
    (tmp_path / "Box0.bin").write_bytes(BOX_BIN)
    return path


@pytest.fixture
def box_glb_path(tmp_path: Path) -> Path:
    path = tmp_path / "Box.glb"
    path.write_bytes(pack_glb(box_document(), BOX_BIN))
    return path
