# gltfcore/loaders/data_uri.py
"""Embedded data: URIs (RFC 2397), base64 payloads only."""

from __future__ import annotations

import base64
import binascii
from typing import Tuple

from gltfcore.errors import FormatError, UnsupportedDataURIError

DATA_PREFIX = "data:"


def is_data_uri(uri: str) -> bool:
    return uri[:len(DATA_PREFIX)].lower() == DATA_PREFIX


def split_data_uri(uri: str) -> Tuple[str, str, str]:
    """
    Split 'data:<mime>;<encoding>,<payload>' into (mime, encoding, payload).

    Only the first comma separates the header from the payload.
    """
    if not is_data_uri(uri):
        raise UnsupportedDataURIError(f"Not a data URI: {uri[:32]!r}")
    header, sep, payload = uri[len(DATA_PREFIX):].partition(",")
    if not sep:
        raise UnsupportedDataURIError(f"data URI has no payload separator: {uri[:32]!r}")
    mime, _, encoding = header.rpartition(";")
    if not mime and encoding and "/" in encoding:
        # "data:text/plain,..." carries no encoding at all
        mime, encoding = encoding, ""
    return mime, encoding, payload


def decode_data_uri(uri: str) -> bytes:
    """Decode a base64 data: URI into bytes."""
    mime, encoding, payload = split_data_uri(uri)
    if encoding.lower() != "base64":
        raise UnsupportedDataURIError(
            f"data URI encoding {encoding or '<none>'!r} is not supported (mime {mime!r})"
        )
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise FormatError(f"data URI has corrupt base64 payload: {e}") from e
