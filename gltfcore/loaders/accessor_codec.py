# gltfcore/loaders/accessor_codec.py
"""Accessor decoding: byte ranges to typed numpy arrays.

Layout follows the glTF 2.0 binary data rules: little-endian components,
elements packed at the buffer view stride (or tightly when no stride is
declared).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

import numpy as np

from gltfcore import log
from gltfcore.errors import ByteRangeError, UnsupportedAccessorLayoutError
from gltfcore.model.document import Accessor, AttributeType, BufferView, ComponentType
from gltfcore.model.reference import Index

if TYPE_CHECKING:
    from gltfcore.loaders.asset_loader import AssetLoader


# ---------- LAYOUT TABLES ----------

COMPONENT_TYPE_SIZE = {
    ComponentType.BYTE: 1,
    ComponentType.UNSIGNED_BYTE: 1,
    ComponentType.SHORT: 2,
    ComponentType.UNSIGNED_SHORT: 2,
    ComponentType.UNSIGNED_INT: 4,
    ComponentType.FLOAT: 4,
}

COMPONENT_TYPE_DTYPE = {
    ComponentType.BYTE: np.dtype("<i1"),
    ComponentType.UNSIGNED_BYTE: np.dtype("<u1"),
    ComponentType.SHORT: np.dtype("<i2"),
    ComponentType.UNSIGNED_SHORT: np.dtype("<u2"),
    ComponentType.UNSIGNED_INT: np.dtype("<u4"),
    ComponentType.FLOAT: np.dtype("<f4"),
}

TYPE_NUM_COMPONENTS = {
    AttributeType.SCALAR: 1,
    AttributeType.VEC2: 2,
    AttributeType.VEC3: 3,
    AttributeType.VEC4: 4,
    AttributeType.MAT2: 4,
    AttributeType.MAT3: 9,
    AttributeType.MAT4: 16,
}

MATRIX_ORDER = {
    AttributeType.MAT2: 2,
    AttributeType.MAT3: 3,
    AttributeType.MAT4: 4,
}

UNSIGNED_INDEX_TYPES = (
    ComponentType.UNSIGNED_BYTE,
    ComponentType.UNSIGNED_SHORT,
    ComponentType.UNSIGNED_INT,
)

# Divisors for normalized integer components
NORMALIZE_DIVISOR = {
    ComponentType.BYTE: 127.0,
    ComponentType.UNSIGNED_BYTE: 255.0,
    ComponentType.SHORT: 32767.0,
    ComponentType.UNSIGNED_SHORT: 65535.0,
}


def element_size(component_type: ComponentType, attribute_type: AttributeType) -> int:
    """Bytes per element, without stride padding."""
    return COMPONENT_TYPE_SIZE[component_type] * TYPE_NUM_COMPONENTS[attribute_type]


def check_layout(accessor: Accessor) -> None:
    """Raise UnsupportedAccessorLayoutError for layouts this codec cannot read."""
    if accessor.type in MATRIX_ORDER and accessor.component_type != ComponentType.FLOAT:
        # Integer matrix columns are padded to 4-byte boundaries
        raise UnsupportedAccessorLayoutError(
            f"{accessor.component_type.name} {accessor.type.value} accessors are not supported"
        )
    if accessor.normalized and accessor.component_type not in NORMALIZE_DIVISOR:
        raise UnsupportedAccessorLayoutError(
            f"normalized {accessor.component_type.name} accessors are not supported"
        )


def accessor_stride(accessor: Accessor, buffer_view: Optional[BufferView]) -> int:
    """Distance between consecutive elements in bytes."""
    size = element_size(accessor.component_type, accessor.type)
    if buffer_view is None or not buffer_view.byte_stride:
        return size
    if buffer_view.byte_stride < size:
        raise UnsupportedAccessorLayoutError(
            f"byteStride {buffer_view.byte_stride} is smaller than element size {size}"
        )
    return buffer_view.byte_stride


def accessor_span(accessor: Accessor, stride: int) -> int:
    """Bytes covered by count elements at the given stride."""
    if accessor.count < 0:
        raise ByteRangeError(f"Accessor {accessor.name or ''} has negative count {accessor.count}")
    if accessor.count == 0:
        return 0
    return (accessor.count - 1) * stride + element_size(accessor.component_type, accessor.type)


# ---------- BOUNDS ----------

@dataclass(frozen=True)
class BoundsViolation:
    """A decoded component outside of the accessor's declared min/max."""
    accessor_name: Optional[str]
    element: int
    component: int
    value: float
    bound: float
    kind: str  # "min" or "max"


def _bounds_array(bounds, dtype: np.dtype) -> np.ndarray:
    values = np.asarray(bounds, dtype=np.float64)
    if dtype.kind == "f":
        # Bounds are usually written from float32 values
        values = values.astype(dtype).astype(np.float64)
    return values


def check_bounds(accessor: Accessor, raw: np.ndarray) -> List[BoundsViolation]:
    """Compare raw (count, n) component values against min/max."""
    violations: List[BoundsViolation] = []
    n = raw.shape[1] if raw.ndim > 1 else 1
    values = raw.reshape(len(raw), n).astype(np.float64)

    for kind, bounds in (("min", accessor.min), ("max", accessor.max)):
        if bounds is None:
            continue
        if len(bounds) != n:
            log.warn(
                f"[accessor_codec] {accessor.name or 'accessor'}: {kind} has {len(bounds)} "
                f"values for {n} components, skipping bounds check"
            )
            continue
        limit = _bounds_array(bounds, raw.dtype)
        outside = values < limit if kind == "min" else values > limit
        for element, component in np.argwhere(outside):
            violations.append(BoundsViolation(
                accessor_name=accessor.name,
                element=int(element),
                component=int(component),
                value=float(values[element, component]),
                bound=float(limit[component]),
                kind=kind,
            ))
    return violations


# ---------- DECODING ----------

def read_elements(data: bytes, accessor: Accessor, stride: int) -> np.ndarray:
    """Read count elements as a (count, n) array of the stored component type."""
    dtype = COMPONENT_TYPE_DTYPE[accessor.component_type]
    num_components = TYPE_NUM_COMPONENTS[accessor.type]
    count = accessor.count
    size = element_size(accessor.component_type, accessor.type)

    if count == 0:
        return np.zeros((0, num_components), dtype=dtype)

    if stride == size:
        # Tightly packed
        data = np.frombuffer(data, dtype=dtype, count=count * num_components)
        return data.reshape(count, num_components)

    # Strided data
    strided = np.ndarray(
        shape=(count, num_components),
        dtype=dtype,
        buffer=data,
        offset=0,
        strides=(stride, dtype.itemsize),
    )
    return strided.copy()


def convert_elements(raw: np.ndarray, accessor: Accessor) -> np.ndarray:
    """Widen raw components to the output layout."""
    component_type = accessor.component_type

    if accessor.normalized:
        divisor = NORMALIZE_DIVISOR[component_type]
        result = np.maximum(raw.astype(np.float32) / np.float32(divisor), np.float32(-1.0))
    elif accessor.type == AttributeType.SCALAR and component_type in UNSIGNED_INDEX_TYPES:
        result = raw.astype(np.uint32)
    else:
        result = raw.astype(np.float32)

    if accessor.type == AttributeType.SCALAR:
        return result.reshape(len(raw))
    order = MATRIX_ORDER.get(accessor.type)
    if order is not None:
        # Column-major storage -> result[i] is the usual row-major matrix
        return np.ascontiguousarray(result.reshape(len(raw), order, order).transpose(0, 2, 1))
    return result


def decode_accessor(
    accessor: Accessor | Index,
    loader: "AssetLoader",
    diagnostics: Optional[List[BoundsViolation]] = None,
) -> np.ndarray:
    """
    Decode an accessor into a numpy array.

    Args:
        accessor: Accessor or reference to one
        loader: AssetLoader owning the accessor's document and bytes
        diagnostics: Optional list receiving BoundsViolation records

    Returns:
        uint32 (count,) for unsigned integer scalars (index data),
        float32 (count,), (count, n) or (count, n, n) for everything else.
    """
    if isinstance(accessor, Index):
        accessor = accessor.resolve(loader.document)

    check_layout(accessor)
    buffer_view = None
    if accessor.buffer_view is not None:
        buffer_view = accessor.buffer_view.resolve(loader.document)
    stride = accessor_stride(accessor, buffer_view)

    data = loader.bytes_for(accessor)
    raw = read_elements(data, accessor, stride)

    if accessor.sparse is not None:
        log.warn(
            f"[accessor_codec] {accessor.name or 'accessor'}: sparse substitution is not applied"
        )

    if loader.spec.check_bounds and (accessor.min is not None or accessor.max is not None):
        violations = check_bounds(accessor, raw)
        if violations:
            first = violations[0]
            log.warn(
                f"[accessor_codec] {accessor.name or 'accessor'}: {len(violations)} component(s) "
                f"outside declared bounds (first: element {first.element}, component "
                f"{first.component}, {first.value} vs {first.kind} {first.bound})"
            )
            if diagnostics is not None:
                diagnostics.extend(violations)

    return convert_elements(raw, accessor)
