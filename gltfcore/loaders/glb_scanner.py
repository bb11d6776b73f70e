# gltfcore/loaders/glb_scanner.py
"""GLB (binary glTF) container scanner.

Splits a .glb byte stream into its header and chunk list. Chunk contents
are not interpreted here.
"""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import List, Optional

from gltfcore.errors import FormatError, TruncationError

GLB_MAGIC = 0x46546C67  # b"glTF"
HEADER_SIZE = 12
CHUNK_HEADER_SIZE = 8

_HEADER = struct.Struct("<III")
_CHUNK_HEADER = struct.Struct("<II")


class ChunkType(enum.Enum):
    JSON = 0x4E4F534A
    BIN = 0x004E4942
    OTHER = None

    @classmethod
    def classify(cls, code: int) -> "ChunkType":
        if code == cls.JSON.value:
            return cls.JSON
        if code == cls.BIN.value:
            return cls.BIN
        return cls.OTHER


@dataclass(frozen=True)
class GLBHeader:
    magic: int
    version: int
    length: int


@dataclass(frozen=True)
class Chunk:
    chunk_type: ChunkType
    type_code: int  # raw code, kept for OTHER chunks
    content: bytes

    @property
    def length(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class GLB:
    header: GLBHeader
    chunks: List[Chunk]

    def json_chunk(self) -> Optional[Chunk]:
        """First JSON-typed chunk, if any."""
        return next((c for c in self.chunks if c.chunk_type is ChunkType.JSON), None)

    def bin_chunk(self) -> Optional[Chunk]:
        """First BIN-typed chunk, if any."""
        return next((c for c in self.chunks if c.chunk_type is ChunkType.BIN), None)


class ScanState(enum.Enum):
    READ_HEADER = "read_header"
    READ_CHUNKS = "read_chunks"
    DONE = "done"


class GLBScanner:
    """
    READ_HEADER -> READ_CHUNKS -> DONE state machine over a byte buffer.

    Consumes exactly the declared total length. Any declared size that runs
    past the available bytes raises TruncationError.
    """

    def __init__(self, data: bytes):
        self._data = memoryview(data)
        self._pos = 0
        self._end = 0
        self.state = ScanState.READ_HEADER
        self.header: Optional[GLBHeader] = None
        self.chunks: List[Chunk] = []

    @property
    def consumed(self) -> int:
        return self._pos

    def _take(self, size: int, limit: int, what: str) -> memoryview:
        if self._pos + size > limit:
            raise TruncationError(
                f"GLB truncated reading {what}: need {size} bytes at offset {self._pos}, "
                f"only {max(limit - self._pos, 0)} available"
            )
        view = self._data[self._pos:self._pos + size]
        self._pos += size
        return view

    def _read_header(self) -> None:
        raw = self._take(HEADER_SIZE, len(self._data), "header")
        magic, version, length = _HEADER.unpack(raw)
        if magic != GLB_MAGIC:
            raise FormatError(f"Invalid GLB magic: 0x{magic:08X}")
        if length < HEADER_SIZE:
            raise FormatError(f"GLB declared length {length} is smaller than its header")
        if length > len(self._data):
            raise TruncationError(
                f"GLB declares {length} bytes but only {len(self._data)} are available"
            )
        self.header = GLBHeader(magic, version, length)
        self._end = length
        self.state = ScanState.READ_CHUNKS

    def _read_chunk(self) -> None:
        chunk_length, type_code = _CHUNK_HEADER.unpack(
            self._take(CHUNK_HEADER_SIZE, self._end, "chunk header")
        )
        content = bytes(self._take(chunk_length, self._end, "chunk content"))
        self.chunks.append(Chunk(ChunkType.classify(type_code), type_code, content))

    def step(self) -> ScanState:
        """Advance by one header or chunk."""
        if self.state is ScanState.READ_HEADER:
            self._read_header()
        elif self.state is ScanState.READ_CHUNKS:
            if self._pos == self._end:
                self.state = ScanState.DONE
            else:
                self._read_chunk()
        return self.state

    def scan(self) -> GLB:
        while self.state is not ScanState.DONE:
            self.step()
        return GLB(header=self.header, chunks=list(self.chunks))


def scan_glb(data: bytes) -> GLB:
    """Parse a GLB byte stream into header and chunks."""
    return GLBScanner(data).scan()
