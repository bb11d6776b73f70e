# gltfcore/loaders/asset_loader.py
"""glTF 2.0 asset loader.

Unifies .gltf (JSON) and .glb (binary container) input and resolves the
bytes behind buffers, buffer views, accessors and images on demand.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional, Union
from urllib.parse import unquote, urlparse

from gltfcore import log
from gltfcore.errors import (
    ByteRangeError,
    FormatError,
    UnrecognizedContainerError,
    UnresolvableBufferError,
)
from gltfcore.loaders.accessor_codec import accessor_span, accessor_stride, element_size
from gltfcore.loaders.buffer_cache import BufferCache
from gltfcore.loaders.data_uri import decode_data_uri, is_data_uri
from gltfcore.loaders.glb_scanner import GLB, GLB_MAGIC, scan_glb
from gltfcore.loaders.io_provider import FileIOProvider, IOProvider
from gltfcore.loaders.load_spec import LoadSpec
from gltfcore.model.document import Accessor, Buffer, BufferView, Document, Image
from gltfcore.model.reference import Index


# ---------- CONTAINER KIND ----------

@dataclass(frozen=True)
class JsonContainer:
    """Plain .gltf document."""


@dataclass(frozen=True)
class BinaryContainer:
    """.glb container with its scanned chunks."""
    glb: GLB


ContainerKind = Union[JsonContainer, BinaryContainer]

SUFFIX_KIND = {
    ".gltf": "json",
    ".glb": "binary",
}


def _guess_kind(location: str | Path, data: Optional[bytes] = None) -> str:
    suffix = PurePosixPath(str(location).replace("\\", "/")).suffix.lower()
    kind = SUFFIX_KIND.get(suffix)
    if kind is None and data is not None and len(data) >= 4:
        kind = "binary" if int.from_bytes(data[:4], "little") == GLB_MAGIC else None
    if kind is None:
        raise UnrecognizedContainerError(f"Unrecognized glTF container: {location}")
    return kind


# ---------- LOADER ----------

class AssetLoader:
    """
    One loaded glTF asset: its Document plus on-demand byte resolution.

    IMPORTANT: Create through AssetLoader.load() or AssetLoader.from_bytes().

    Bytes fetched through URIs are cached for the lifetime of the loader.
    The cache is private to this instance.
    """

    def __init__(
        self,
        location: str | Path,
        kind: ContainerKind,
        document: Document,
        io: Optional[IOProvider] = None,
        spec: Optional[LoadSpec] = None,
    ):
        self.location = location
        self.kind = kind
        self.document = document
        self.io = io if io is not None else FileIOProvider()
        self.spec = spec if spec is not None else LoadSpec()
        self._cache = BufferCache()

    # --- Construction ---

    @classmethod
    def load(
        cls,
        location: str | Path,
        io: Optional[IOProvider] = None,
        spec: Optional[LoadSpec] = None,
    ) -> "AssetLoader":
        """Load a .gltf or .glb asset.

        Args:
            location: Path (or location understood by io) of the asset
            io: Byte source, defaults to the local filesystem
            spec: Load settings, defaults to the asset's .meta file

        Returns:
            AssetLoader wrapping the decoded Document
        """
        kind = _guess_kind(location)
        if io is None:
            io = FileIOProvider()
        if spec is None:
            spec = LoadSpec.for_asset_file(location)
        data = io.read(location)
        return cls.from_bytes(data, location, kind=kind, io=io, spec=spec)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        location: str | Path,
        kind: Optional[str] = None,
        io: Optional[IOProvider] = None,
        spec: Optional[LoadSpec] = None,
    ) -> "AssetLoader":
        """Build a loader from asset bytes already in memory.

        kind is "json" or "binary"; guessed from location and data when None.
        location anchors relative buffer URIs.
        """
        if kind is None:
            kind = _guess_kind(location, data)
        spec = spec if spec is not None else LoadSpec()

        if kind == "binary":
            glb = scan_glb(data)
            if glb.header.version != 2 and not spec.accept_any_version:
                raise FormatError(f"Unsupported glTF version: {glb.header.version}")
            json_chunk = glb.json_chunk()
            if json_chunk is None:
                raise FormatError("No JSON chunk found in GLB")
            document = Document.decode(json_chunk.content)
            container: ContainerKind = BinaryContainer(glb)
        elif kind == "json":
            document = Document.decode(data)
            container = JsonContainer()
        else:
            raise UnrecognizedContainerError(f"Unrecognized glTF container kind: {kind!r}")

        log.debug(
            f"[AssetLoader] Loaded {location}: {len(document.meshes)} meshes, "
            f"{len(document.nodes)} nodes, {len(document.buffers)} buffers"
        )
        return cls(location, container, document, io=io, spec=spec)

    # --- Properties ---

    @property
    def is_binary(self) -> bool:
        return isinstance(self.kind, BinaryContainer)

    def resolve(self, ref: Index):
        """Resolve a reference against this loader's document."""
        return ref.resolve(self.document)

    # --- URI resolution ---

    def resolve_uri(self, uri: str) -> str | Path:
        """Location of a sibling resource as passed to the I/O provider."""
        parsed = urlparse(uri)
        if parsed.scheme == "file" and not parsed.netloc and not parsed.path.startswith("/"):
            # file:rel.bin is relative to the asset
            uri = parsed.path
        # Single letter schemes are Windows drive letters
        elif parsed.scheme and len(parsed.scheme) > 1:
            return uri
        relative = unquote(uri)
        if isinstance(self.location, str) and "://" in self.location:
            base = self.location.rsplit("/", 1)[0]
            return f"{base}/{uri}"
        return Path(self.location).parent / relative

    def data_for_uri(self, uri: str) -> bytes:
        """Bytes behind a buffer or image URI, memoized by URI text."""
        cached = self._cache.get(uri)
        if cached is not None:
            log.debug(f"[AssetLoader] Cache hit: {uri[:64]}")
            return cached
        if is_data_uri(uri):
            return self._cache.get_or_fetch(uri, lambda: decode_data_uri(uri))
        return self._cache.get_or_fetch(uri, lambda: self.io.read(self.resolve_uri(uri)))

    def embedded_bin(self) -> bytes:
        """Content of the BIN chunk of a .glb container."""
        if not isinstance(self.kind, BinaryContainer):
            raise UnresolvableBufferError(
                f"Buffer without uri in non-binary asset {self.location}"
            )
        chunk = self.kind.glb.bin_chunk()
        if chunk is None:
            raise UnresolvableBufferError(f"No BIN chunk found in {self.location}")
        return chunk.content

    # --- Byte resolution ---

    def bytes_for(self, obj: Union[Index, Buffer, BufferView, Accessor, Image]) -> bytes:
        """Bytes behind a buffer, buffer view, accessor or image (or a reference to one)."""
        if isinstance(obj, Index):
            obj = obj.resolve(self.document)
        if isinstance(obj, Buffer):
            return self._buffer_bytes(obj)
        if isinstance(obj, BufferView):
            return self._buffer_view_bytes(obj)
        if isinstance(obj, Accessor):
            return self._accessor_bytes(obj)
        if isinstance(obj, Image):
            return self._image_bytes(obj)
        raise TypeError(f"Cannot resolve bytes for {type(obj).__name__}")

    def _buffer_bytes(self, buffer: Buffer) -> bytes:
        if buffer.uri is None:
            data = self.embedded_bin()
        else:
            data = self.data_for_uri(buffer.uri)
        if len(data) < buffer.byte_length:
            log.warn(
                f"[AssetLoader] Buffer {buffer.name or buffer.uri or '<bin>'} has "
                f"{len(data)} bytes, declared {buffer.byte_length}"
            )
        return data

    def _buffer_view_bytes(self, buffer_view: BufferView) -> bytes:
        data = self._buffer_bytes(buffer_view.buffer.resolve(self.document))
        start = buffer_view.byte_offset
        end = start + buffer_view.byte_length
        if start < 0 or end > len(data):
            raise ByteRangeError(
                f"Buffer view [{start}, {end}) exceeds buffer length {len(data)}"
            )
        return data[start:end]

    def _accessor_bytes(self, accessor: Accessor) -> bytes:
        if accessor.buffer_view is None:
            # No buffer view: all zeros
            return bytes(accessor_span(accessor, element_size(accessor.component_type, accessor.type)))

        buffer_view = accessor.buffer_view.resolve(self.document)
        span = accessor_span(accessor, accessor_stride(accessor, buffer_view))
        data = self._buffer_bytes(buffer_view.buffer.resolve(self.document))

        start = buffer_view.byte_offset + accessor.byte_offset
        end = start + span
        view_end = buffer_view.byte_offset + buffer_view.byte_length
        if buffer_view.byte_offset < 0 or accessor.byte_offset < 0 or start < 0 or end > view_end:
            raise ByteRangeError(
                f"Accessor {accessor.name or ''} range [{start}, {end}) exceeds buffer view "
                f"[{buffer_view.byte_offset}, {view_end})"
            )
        if end > len(data):
            raise ByteRangeError(
                f"Accessor {accessor.name or ''} range [{start}, {end}) exceeds buffer length "
                f"{len(data)}"
            )
        return data[start:end]

    def _image_bytes(self, image: Image) -> bytes:
        if image.buffer_view is not None:
            return self._buffer_view_bytes(image.buffer_view.resolve(self.document))
        if image.uri is not None:
            return self.data_for_uri(image.uri)
        raise UnresolvableBufferError(f"Image {image.name or ''} has neither uri nor bufferView")
