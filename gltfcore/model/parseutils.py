# gltfcore/model/parseutils.py
"""Field readers for decoding glTF JSON objects.

Every reader takes the parent object, the key and the JSON path of the
parent (for error messages). A missing key returns `default`; when no
default is given the field is required and its absence is a FormatError.
"""

from __future__ import annotations

import enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type, TypeVar

from gltfcore.errors import FormatError
from gltfcore.model.reference import Index, Target

T = TypeVar("T")
E = TypeVar("E", bound=enum.Enum)

MISSING: Any = object()


def _is_int(x) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


def _is_number(x) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def _lookup(obj: dict, key: str, path: str, default):
    value = obj.get(key)
    if value is None:
        if default is MISSING:
            raise FormatError(f"{path}: missing required field '{key}'")
        return MISSING
    return value


def expect_object(value, path: str) -> dict:
    if not isinstance(value, dict):
        raise FormatError(f"{path}: expected object, got {type(value).__name__}")
    return value


def get_int(obj: dict, key: str, path: str, default=MISSING) -> int:
    value = _lookup(obj, key, path, default)
    if value is MISSING:
        return default
    if not _is_int(value):
        raise FormatError(f"{path}.{key}: expected integer, got {value!r}")
    return value


def get_uint(obj: dict, key: str, path: str, default=MISSING) -> int:
    """Integer field that must be >= 0 (offsets, lengths, counts)."""
    value = get_int(obj, key, path, default)
    if isinstance(value, int) and value < 0:
        raise FormatError(f"{path}.{key}: expected non-negative integer, got {value!r}")
    return value


def get_float(obj: dict, key: str, path: str, default=MISSING) -> float:
    value = _lookup(obj, key, path, default)
    if value is MISSING:
        return default
    if not _is_number(value):
        raise FormatError(f"{path}.{key}: expected number, got {value!r}")
    return float(value)


def get_str(obj: dict, key: str, path: str, default=MISSING) -> str:
    value = _lookup(obj, key, path, default)
    if value is MISSING:
        return default
    if not isinstance(value, str):
        raise FormatError(f"{path}.{key}: expected string, got {value!r}")
    return value


def get_bool(obj: dict, key: str, path: str, default=MISSING) -> bool:
    value = _lookup(obj, key, path, default)
    if value is MISSING:
        return default
    if not isinstance(value, bool):
        raise FormatError(f"{path}.{key}: expected boolean, got {value!r}")
    return value


def get_float_list(
    obj: dict, key: str, path: str, length: Optional[int] = None, default=MISSING
) -> Tuple[float, ...]:
    value = _lookup(obj, key, path, default)
    if value is MISSING:
        return default
    if not isinstance(value, list) or not all(_is_number(x) for x in value):
        raise FormatError(f"{path}.{key}: expected array of numbers, got {value!r}")
    if length is not None and len(value) != length:
        raise FormatError(f"{path}.{key}: expected {length} numbers, got {len(value)}")
    return tuple(float(x) for x in value)


def get_str_list(obj: dict, key: str, path: str, default=()) -> Tuple[str, ...]:
    value = _lookup(obj, key, path, default)
    if value is MISSING:
        return default
    if not isinstance(value, list) or not all(isinstance(x, str) for x in value):
        raise FormatError(f"{path}.{key}: expected array of strings, got {value!r}")
    return tuple(value)


def to_ref(value, target: Target, path: str) -> Index:
    """Turn a JSON integer into a typed reference. Range is not checked."""
    if not _is_int(value) or value < 0:
        raise FormatError(f"{path}: expected non-negative integer reference, got {value!r}")
    return Index(target, value)


def get_ref(obj: dict, key: str, path: str, target: Target, default=None) -> Optional[Index]:
    value = _lookup(obj, key, path, default)
    if value is MISSING:
        return default
    return to_ref(value, target, f"{path}.{key}")


def get_ref_list(obj: dict, key: str, path: str, target: Target) -> Tuple[Index, ...]:
    value = obj.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        raise FormatError(f"{path}.{key}: expected array of references, got {value!r}")
    return tuple(to_ref(v, target, f"{path}.{key}[{i}]") for i, v in enumerate(value))


def to_ref_map(value, target: Target, path: str) -> Mapping[str, Index]:
    """Read-only name -> reference map (primitive attributes, morph targets)."""
    if not isinstance(value, dict):
        raise FormatError(f"{path}: expected object of references, got {value!r}")
    return MappingProxyType(
        {name: to_ref(v, target, f"{path}.{name}") for name, v in value.items()}
    )


def get_enum(obj: dict, key: str, path: str, enum_cls: Type[E], default=MISSING) -> E:
    """Read a reserved code. Values outside of enum_cls are a FormatError."""
    value = _lookup(obj, key, path, default)
    if value is MISSING:
        return default
    if isinstance(value, bool):
        raise FormatError(f"{path}.{key}: unknown {enum_cls.__name__} value {value!r}")
    try:
        return enum_cls(value)
    except ValueError:
        raise FormatError(
            f"{path}.{key}: unknown {enum_cls.__name__} value {value!r}"
        ) from None


def get_object(
    obj: dict, key: str, path: str, decode: Callable[[dict, str], T], default=None
) -> Optional[T]:
    value = _lookup(obj, key, path, default)
    if value is MISSING:
        return default
    sub_path = f"{path}.{key}"
    return decode(expect_object(value, sub_path), sub_path)


def get_object_list(
    obj: dict, key: str, path: str, decode: Callable[[dict, str], T], required: bool = False
) -> Tuple[T, ...]:
    value = obj.get(key)
    if value is None:
        if required:
            raise FormatError(f"{path}: missing required field '{key}'")
        return ()
    if not isinstance(value, list):
        raise FormatError(f"{path}.{key}: expected array, got {type(value).__name__}")
    result = []
    for i, item in enumerate(value):
        item_path = f"{path}.{key}[{i}]"
        result.append(decode(expect_object(item, item_path), item_path))
    return tuple(result)


def get_raw(obj: dict, key: str, default=None):
    """Pass-through for sections that are preserved but not interpreted."""
    value = obj.get(key)
    return default if value is None else value
