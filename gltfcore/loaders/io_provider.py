# gltfcore/loaders/io_provider.py
"""Byte sources used to read top-level assets and their sibling resources."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname


@runtime_checkable
class IOProvider(Protocol):
    """Anything that can turn a location into bytes.

    Errors are reported as OSError and are propagated unchanged by the loader.
    """

    def read(self, location: str | Path) -> bytes:
        ...


def file_uri_to_path(uri: str) -> Path:
    """Convert a file: URI to a local path."""
    parsed = urlparse(uri)
    return Path(url2pathname(unquote(parsed.path)))


class FileIOProvider:
    """Reads local files. Accepts paths and file: URIs."""

    def read(self, location: str | Path) -> bytes:
        if isinstance(location, str):
            scheme = urlparse(location).scheme
            # Single letter schemes are Windows drive letters
            if len(scheme) > 1:
                if scheme != "file":
                    raise OSError(f"Unsupported location scheme '{scheme}': {location}")
                location = file_uri_to_path(location)
        with open(location, "rb") as f:
            return f.read()
