# gltfcore/model/reference.py
"""Typed references between the top-level arrays of a glTF document.

A reference is an integer plus the name of the array it points into. It is
never checked when the document is decoded; `Index.resolve` is the only
place where a reference is validated.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from gltfcore.errors import InvalidIndexError

if TYPE_CHECKING:
    from gltfcore.model.document import Document


class Target(enum.Enum):
    """Referent array. The value is the Document attribute holding it."""

    ACCESSORS = "accessors"
    ANIMATIONS = "animations"
    BUFFERS = "buffers"
    BUFFER_VIEWS = "buffer_views"
    CAMERAS = "cameras"
    IMAGES = "images"
    MATERIALS = "materials"
    MESHES = "meshes"
    NODES = "nodes"
    SAMPLERS = "samplers"
    SCENES = "scenes"
    SKINS = "skins"
    TEXTURES = "textures"


@dataclass(frozen=True)
class Index:
    target: Target
    index: int

    def resolve(self, document: "Document") -> Any:
        """Return the referenced element or raise InvalidIndexError."""
        elements = getattr(document, self.target.value)
        if not 0 <= self.index < len(elements):
            raise InvalidIndexError(
                f"{self} is out of range: document has {len(elements)} {self.target.value}"
            )
        return elements[self.index]

    def __int__(self) -> int:
        return self.index

    def __repr__(self) -> str:
        return f"{self.target.value}#{self.index}"
