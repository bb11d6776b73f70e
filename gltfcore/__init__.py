"""
gltfcore - read-only glTF 2.0 loader.

Main modules:
- model - immutable document records and typed references
- loaders - GLB scanning, buffer resolution, accessor decoding
"""

from .errors import (
    ByteRangeError,
    FormatError,
    GLTFError,
    InvalidIndexError,
    TruncationError,
    UnrecognizedContainerError,
    UnresolvableBufferError,
    UnsupportedAccessorLayoutError,
    UnsupportedDataURIError,
)
from .model import Document, Index, Target
from .loaders import AssetLoader, LoadSpec, decode_accessor, scan_glb

__version__ = '0.1.0'

__all__ = [
    'AssetLoader',
    'Document',
    'Index',
    'LoadSpec',
    'Target',
    'decode_accessor',
    'scan_glb',
    # Errors
    'GLTFError',
    'FormatError',
    'UnrecognizedContainerError',
    'TruncationError',
    'InvalidIndexError',
    'ByteRangeError',
    'UnresolvableBufferError',
    'UnsupportedDataURIError',
    'UnsupportedAccessorLayoutError',
]
