# gltfcore/model/document.py
"""glTF 2.0 document model.

Immutable records decoded from the JSON part of an asset. Cross references
are stored as `Index` values and checked only when resolved.

https://registry.khronos.org/glTF/specs/2.0/glTF-2.0.html
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from gltfcore.errors import FormatError
from gltfcore.model.parseutils import (
    MISSING,
    expect_object,
    get_bool,
    get_enum,
    get_float,
    get_float_list,
    get_int,
    get_uint,
    get_object,
    get_object_list,
    get_raw,
    get_ref,
    get_ref_list,
    get_str,
    get_str_list,
    to_ref_map,
)
from gltfcore.model.reference import Index, Target


# ---------- ENUMS ----------

class ComponentType(enum.IntEnum):
    BYTE = 5120
    UNSIGNED_BYTE = 5121
    SHORT = 5122
    UNSIGNED_SHORT = 5123
    UNSIGNED_INT = 5125
    FLOAT = 5126


class AttributeType(enum.Enum):
    SCALAR = "SCALAR"
    VEC2 = "VEC2"
    VEC3 = "VEC3"
    VEC4 = "VEC4"
    MAT2 = "MAT2"
    MAT3 = "MAT3"
    MAT4 = "MAT4"


class BufferTarget(enum.IntEnum):
    ARRAY_BUFFER = 34962
    ELEMENT_ARRAY_BUFFER = 34963


class PrimitiveMode(enum.IntEnum):
    POINTS = 0
    LINES = 1
    LINE_LOOP = 2
    LINE_STRIP = 3
    TRIANGLES = 4
    TRIANGLE_STRIP = 5
    TRIANGLE_FAN = 6


class MagFilter(enum.IntEnum):
    NEAREST = 9728
    LINEAR = 9729


class MinFilter(enum.IntEnum):
    NEAREST = 9728
    LINEAR = 9729
    NEAREST_MIPMAP_NEAREST = 9984
    LINEAR_MIPMAP_NEAREST = 9985
    NEAREST_MIPMAP_LINEAR = 9986
    LINEAR_MIPMAP_LINEAR = 9987


class Wrap(enum.IntEnum):
    CLAMP_TO_EDGE = 33071
    MIRRORED_REPEAT = 33648
    REPEAT = 10497


class AlphaMode(enum.Enum):
    OPAQUE = "OPAQUE"
    MASK = "MASK"
    BLEND = "BLEND"


class CameraType(enum.Enum):
    PERSPECTIVE = "perspective"
    ORTHOGRAPHIC = "orthographic"


def _read_only(value):
    if isinstance(value, dict):
        return MappingProxyType(value)
    return value


# ---------- ELEMENTS ----------

@dataclass(frozen=True)
class Asset:
    version: str
    min_version: Optional[str] = None
    generator: Optional[str] = None
    copyright: Optional[str] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Asset":
        return cls(
            version=get_str(obj, "version", path),
            min_version=get_str(obj, "minVersion", path, None),
            generator=get_str(obj, "generator", path, None),
            copyright=get_str(obj, "copyright", path, None),
        )


@dataclass(frozen=True)
class Buffer:
    """Raw binary blob. uri=None means the BIN chunk of a .glb container."""
    byte_length: int
    uri: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Buffer":
        return cls(
            byte_length=get_uint(obj, "byteLength", path),
            uri=get_str(obj, "uri", path, None),
            name=get_str(obj, "name", path, None),
        )


@dataclass(frozen=True)
class BufferView:
    buffer: Index
    byte_length: int
    byte_offset: int = 0
    byte_stride: Optional[int] = None
    target: Optional[BufferTarget] = None
    name: Optional[str] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "BufferView":
        return cls(
            buffer=get_ref(obj, "buffer", path, Target.BUFFERS, MISSING),
            byte_length=get_uint(obj, "byteLength", path),
            byte_offset=get_uint(obj, "byteOffset", path, 0),
            byte_stride=get_uint(obj, "byteStride", path, None),
            target=get_enum(obj, "target", path, BufferTarget, None),
            name=get_str(obj, "name", path, None),
        )


@dataclass(frozen=True)
class Accessor:
    """Typed view over a buffer view. buffer_view=None means zero-filled."""
    component_type: ComponentType
    type: AttributeType
    count: int
    byte_offset: int = 0
    normalized: bool = False
    buffer_view: Optional[Index] = None
    min: Optional[Tuple[float, ...]] = None
    max: Optional[Tuple[float, ...]] = None
    # Kept as raw JSON, sparse substitution is not applied.
    sparse: Optional[Mapping[str, Any]] = None
    name: Optional[str] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Accessor":
        return cls(
            component_type=get_enum(obj, "componentType", path, ComponentType),
            type=get_enum(obj, "type", path, AttributeType),
            count=get_uint(obj, "count", path),
            byte_offset=get_uint(obj, "byteOffset", path, 0),
            normalized=get_bool(obj, "normalized", path, False),
            buffer_view=get_ref(obj, "bufferView", path, Target.BUFFER_VIEWS),
            min=get_float_list(obj, "min", path, default=None),
            max=get_float_list(obj, "max", path, default=None),
            sparse=_read_only(get_raw(obj, "sparse")),
            name=get_str(obj, "name", path, None),
        )


@dataclass(frozen=True)
class Animation:
    """Animation payload, preserved as raw JSON."""
    name: Optional[str] = None
    channels: Tuple[Any, ...] = ()
    samplers: Tuple[Any, ...] = ()

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Animation":
        return cls(
            name=get_str(obj, "name", path, None),
            channels=tuple(get_raw(obj, "channels", [])),
            samplers=tuple(get_raw(obj, "samplers", [])),
        )


@dataclass(frozen=True)
class PerspectiveProjection:
    yfov: float
    znear: float
    aspect_ratio: Optional[float] = None
    zfar: Optional[float] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "PerspectiveProjection":
        return cls(
            yfov=get_float(obj, "yfov", path),
            znear=get_float(obj, "znear", path),
            aspect_ratio=get_float(obj, "aspectRatio", path, None),
            zfar=get_float(obj, "zfar", path, None),
        )


@dataclass(frozen=True)
class OrthographicProjection:
    xmag: float
    ymag: float
    zfar: float
    znear: float

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "OrthographicProjection":
        return cls(
            xmag=get_float(obj, "xmag", path),
            ymag=get_float(obj, "ymag", path),
            zfar=get_float(obj, "zfar", path),
            znear=get_float(obj, "znear", path),
        )


@dataclass(frozen=True)
class Camera:
    type: CameraType
    perspective: Optional[PerspectiveProjection] = None
    orthographic: Optional[OrthographicProjection] = None
    name: Optional[str] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Camera":
        return cls(
            type=get_enum(obj, "type", path, CameraType),
            perspective=get_object(obj, "perspective", path, PerspectiveProjection.from_json),
            orthographic=get_object(obj, "orthographic", path, OrthographicProjection.from_json),
            name=get_str(obj, "name", path, None),
        )


@dataclass(frozen=True)
class Image:
    uri: Optional[str] = None
    mime_type: Optional[str] = None
    buffer_view: Optional[Index] = None
    name: Optional[str] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Image":
        return cls(
            uri=get_str(obj, "uri", path, None),
            mime_type=get_str(obj, "mimeType", path, None),
            buffer_view=get_ref(obj, "bufferView", path, Target.BUFFER_VIEWS),
            name=get_str(obj, "name", path, None),
        )


@dataclass(frozen=True)
class TextureInfo:
    index: Index
    tex_coord: int = 0
    # normalTexture.scale / occlusionTexture.strength
    scale: Optional[float] = None
    strength: Optional[float] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "TextureInfo":
        return cls(
            index=get_ref(obj, "index", path, Target.TEXTURES, MISSING),
            tex_coord=get_uint(obj, "texCoord", path, 0),
            scale=get_float(obj, "scale", path, None),
            strength=get_float(obj, "strength", path, None),
        )


@dataclass(frozen=True)
class PBRMetallicRoughness:
    base_color_factor: Tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    base_color_texture: Optional[TextureInfo] = None
    metallic_factor: float = 1.0
    roughness_factor: float = 1.0
    metallic_roughness_texture: Optional[TextureInfo] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "PBRMetallicRoughness":
        return cls(
            base_color_factor=get_float_list(obj, "baseColorFactor", path, 4, (1.0, 1.0, 1.0, 1.0)),
            base_color_texture=get_object(obj, "baseColorTexture", path, TextureInfo.from_json),
            metallic_factor=get_float(obj, "metallicFactor", path, 1.0),
            roughness_factor=get_float(obj, "roughnessFactor", path, 1.0),
            metallic_roughness_texture=get_object(
                obj, "metallicRoughnessTexture", path, TextureInfo.from_json
            ),
        )


@dataclass(frozen=True)
class Material:
    name: Optional[str] = None
    pbr_metallic_roughness: Optional[PBRMetallicRoughness] = None
    normal_texture: Optional[TextureInfo] = None
    occlusion_texture: Optional[TextureInfo] = None
    emissive_texture: Optional[TextureInfo] = None
    emissive_factor: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    alpha_mode: AlphaMode = AlphaMode.OPAQUE
    alpha_cutoff: float = 0.5
    double_sided: bool = False

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Material":
        return cls(
            name=get_str(obj, "name", path, None),
            pbr_metallic_roughness=get_object(
                obj, "pbrMetallicRoughness", path, PBRMetallicRoughness.from_json
            ),
            normal_texture=get_object(obj, "normalTexture", path, TextureInfo.from_json),
            occlusion_texture=get_object(obj, "occlusionTexture", path, TextureInfo.from_json),
            emissive_texture=get_object(obj, "emissiveTexture", path, TextureInfo.from_json),
            emissive_factor=get_float_list(obj, "emissiveFactor", path, 3, (0.0, 0.0, 0.0)),
            alpha_mode=get_enum(obj, "alphaMode", path, AlphaMode, AlphaMode.OPAQUE),
            alpha_cutoff=get_float(obj, "alphaCutoff", path, 0.5),
            double_sided=get_bool(obj, "doubleSided", path, False),
        )


@dataclass(frozen=True)
class Primitive:
    # Semantic name (POSITION, NORMAL, TEXCOORD_0, _CUSTOM, ...) -> accessor
    attributes: Mapping[str, Index]
    indices: Optional[Index] = None
    material: Optional[Index] = None
    mode: PrimitiveMode = PrimitiveMode.TRIANGLES
    targets: Tuple[Mapping[str, Index], ...] = ()

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Primitive":
        if obj.get("attributes") is None:
            raise FormatError(f"{path}: missing required field 'attributes'")
        targets = get_raw(obj, "targets", [])
        if not isinstance(targets, list):
            raise FormatError(f"{path}.targets: expected array, got {targets!r}")
        return cls(
            attributes=to_ref_map(obj["attributes"], Target.ACCESSORS, f"{path}.attributes"),
            indices=get_ref(obj, "indices", path, Target.ACCESSORS),
            material=get_ref(obj, "material", path, Target.MATERIALS),
            mode=get_enum(obj, "mode", path, PrimitiveMode, PrimitiveMode.TRIANGLES),
            targets=tuple(
                to_ref_map(t, Target.ACCESSORS, f"{path}.targets[{i}]")
                for i, t in enumerate(targets)
            ),
        )


@dataclass(frozen=True)
class Mesh:
    primitives: Tuple[Primitive, ...]
    weights: Tuple[float, ...] = ()
    name: Optional[str] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Mesh":
        return cls(
            primitives=get_object_list(obj, "primitives", path, Primitive.from_json, required=True),
            weights=get_float_list(obj, "weights", path, default=()),
            name=get_str(obj, "name", path, None),
        )


@dataclass(frozen=True)
class Node:
    """
    Scene graph node.

    matrix holds 16 floats in column-major order, or None when absent.
    Children are not guaranteed to form a tree; walkers must guard
    against cycles.
    """
    children: Tuple[Index, ...] = ()
    camera: Optional[Index] = None
    mesh: Optional[Index] = None
    skin: Optional[Index] = None
    matrix: Optional[Tuple[float, ...]] = None
    translation: Optional[Tuple[float, float, float]] = None
    rotation: Optional[Tuple[float, float, float, float]] = None  # xyzw
    scale: Optional[Tuple[float, float, float]] = None
    weights: Tuple[float, ...] = ()
    name: Optional[str] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Node":
        matrix = get_float_list(obj, "matrix", path, default=None)
        if matrix is not None:
            if len(matrix) == 0:
                matrix = None
            elif len(matrix) != 16:
                raise FormatError(f"{path}.matrix: expected 16 numbers, got {len(matrix)}")
        return cls(
            children=get_ref_list(obj, "children", path, Target.NODES),
            camera=get_ref(obj, "camera", path, Target.CAMERAS),
            mesh=get_ref(obj, "mesh", path, Target.MESHES),
            skin=get_ref(obj, "skin", path, Target.SKINS),
            matrix=matrix,
            translation=get_float_list(obj, "translation", path, 3, None),
            rotation=get_float_list(obj, "rotation", path, 4, None),
            scale=get_float_list(obj, "scale", path, 3, None),
            weights=get_float_list(obj, "weights", path, default=()),
            name=get_str(obj, "name", path, None),
        )


@dataclass(frozen=True)
class Sampler:
    mag_filter: Optional[MagFilter] = None
    min_filter: Optional[MinFilter] = None
    wrap_s: Wrap = Wrap.REPEAT
    wrap_t: Wrap = Wrap.REPEAT
    name: Optional[str] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Sampler":
        return cls(
            mag_filter=get_enum(obj, "magFilter", path, MagFilter, None),
            min_filter=get_enum(obj, "minFilter", path, MinFilter, None),
            wrap_s=get_enum(obj, "wrapS", path, Wrap, Wrap.REPEAT),
            wrap_t=get_enum(obj, "wrapT", path, Wrap, Wrap.REPEAT),
            name=get_str(obj, "name", path, None),
        )


@dataclass(frozen=True)
class Scene:
    nodes: Tuple[Index, ...] = ()
    name: Optional[str] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Scene":
        return cls(
            nodes=get_ref_list(obj, "nodes", path, Target.NODES),
            name=get_str(obj, "name", path, None),
        )


@dataclass(frozen=True)
class Skin:
    """Skin payload. References are decoded but never validated here."""
    joints: Tuple[Index, ...] = ()
    inverse_bind_matrices: Optional[Index] = None
    skeleton: Optional[Index] = None
    name: Optional[str] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Skin":
        return cls(
            joints=get_ref_list(obj, "joints", path, Target.NODES),
            inverse_bind_matrices=get_ref(obj, "inverseBindMatrices", path, Target.ACCESSORS),
            skeleton=get_ref(obj, "skeleton", path, Target.NODES),
            name=get_str(obj, "name", path, None),
        )


@dataclass(frozen=True)
class Texture:
    sampler: Optional[Index] = None
    source: Optional[Index] = None
    name: Optional[str] = None

    @classmethod
    def from_json(cls, obj: dict, path: str) -> "Texture":
        return cls(
            sampler=get_ref(obj, "sampler", path, Target.SAMPLERS),
            source=get_ref(obj, "source", path, Target.IMAGES),
            name=get_str(obj, "name", path, None),
        )


# ---------- DOCUMENT ----------

@dataclass(frozen=True)
class Document:
    """Root of a decoded glTF file.

    Element tuples and reference maps are read-only. Preserved raw JSON
    (extensions, extras, sparse, animation payloads) is read-only only at
    its top level; nested values are the decoded JSON objects.
    """
    asset: Asset
    accessors: Tuple[Accessor, ...] = ()
    animations: Tuple[Animation, ...] = ()
    buffers: Tuple[Buffer, ...] = ()
    buffer_views: Tuple[BufferView, ...] = ()
    cameras: Tuple[Camera, ...] = ()
    images: Tuple[Image, ...] = ()
    materials: Tuple[Material, ...] = ()
    meshes: Tuple[Mesh, ...] = ()
    nodes: Tuple[Node, ...] = ()
    samplers: Tuple[Sampler, ...] = ()
    scene: Optional[Index] = None
    scenes: Tuple[Scene, ...] = ()
    skins: Tuple[Skin, ...] = ()
    textures: Tuple[Texture, ...] = ()
    extensions_used: Tuple[str, ...] = ()
    extensions_required: Tuple[str, ...] = ()
    extensions: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    extras: Any = None

    @classmethod
    def decode(cls, data: bytes | str) -> "Document":
        """Decode the JSON form of a glTF document."""
        if isinstance(data, (bytes, bytearray, memoryview)):
            try:
                data = bytes(data).decode("utf-8")
            except UnicodeDecodeError as e:
                raise FormatError(f"glTF JSON is not valid UTF-8: {e}") from e
        try:
            obj = json.loads(data)
        except json.JSONDecodeError as e:
            raise FormatError(f"glTF JSON is malformed: {e}") from e
        return cls.from_dict(obj)

    @classmethod
    def from_dict(cls, obj: Any) -> "Document":
        """Decode an already parsed JSON object."""
        path = "$"
        obj = expect_object(obj, path)
        extensions = get_raw(obj, "extensions", {})
        return cls(
            asset=get_object(obj, "asset", path, Asset.from_json, MISSING),
            accessors=get_object_list(obj, "accessors", path, Accessor.from_json),
            animations=get_object_list(obj, "animations", path, Animation.from_json),
            buffers=get_object_list(obj, "buffers", path, Buffer.from_json),
            buffer_views=get_object_list(obj, "bufferViews", path, BufferView.from_json),
            cameras=get_object_list(obj, "cameras", path, Camera.from_json),
            images=get_object_list(obj, "images", path, Image.from_json),
            materials=get_object_list(obj, "materials", path, Material.from_json),
            meshes=get_object_list(obj, "meshes", path, Mesh.from_json),
            nodes=get_object_list(obj, "nodes", path, Node.from_json),
            samplers=get_object_list(obj, "samplers", path, Sampler.from_json),
            scene=get_ref(obj, "scene", path, Target.SCENES),
            scenes=get_object_list(obj, "scenes", path, Scene.from_json),
            skins=get_object_list(obj, "skins", path, Skin.from_json),
            textures=get_object_list(obj, "textures", path, Texture.from_json),
            extensions_used=get_str_list(obj, "extensionsUsed", path),
            extensions_required=get_str_list(obj, "extensionsRequired", path),
            extensions=MappingProxyType(expect_object(extensions, f"{path}.extensions")),
            extras=get_raw(obj, "extras"),
        )

    def resolve(self, ref: Index) -> Any:
        """Shortcut for ref.resolve(self)."""
        return ref.resolve(self)
