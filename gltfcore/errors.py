"""Error types raised while scanning, decoding and resolving glTF assets."""


class GLTFError(Exception):
    """Base error for glTF loading."""


class FormatError(GLTFError, ValueError):
    """Malformed input: bad header, unknown enum value, wrong field shape."""


class UnrecognizedContainerError(FormatError):
    """Input is neither a .gltf document nor a .glb container."""


class TruncationError(GLTFError):
    """Binary container ended before its declared contents."""


class InvalidIndexError(GLTFError, IndexError):
    """Reference points outside of its target array."""


class ByteRangeError(GLTFError, ValueError):
    """Byte sub-range does not fit into the bytes it slices."""


class UnresolvableBufferError(GLTFError):
    """No source of bytes exists for a buffer."""


class UnsupportedDataURIError(GLTFError):
    """data: URI with an encoding other than base64."""


class UnsupportedAccessorLayoutError(GLTFError):
    """Accessor component type / shape combination cannot be decoded."""


__all__ = [
    "GLTFError",
    "FormatError",
    "UnrecognizedContainerError",
    "TruncationError",
    "InvalidIndexError",
    "ByteRangeError",
    "UnresolvableBufferError",
    "UnsupportedDataURIError",
    "UnsupportedAccessorLayoutError",
]
