"""Tests for data: URI decoding."""

import pytest

from gltfcore.errors import FormatError, UnsupportedDataURIError
from gltfcore.loaders.data_uri import decode_data_uri, is_data_uri, split_data_uri


def test_data_uri_decoding():
    assert decode_data_uri("data:application/octet-stream;base64,QUJD") == b"ABC"
    assert decode_data_uri("data:image/png;base64,QUJD") == b"ABC"


def test_is_data_uri():
    assert is_data_uri("data:application/octet-stream;base64,QUJD")
    assert not is_data_uri("Box0.bin")


def test_data_uri_splits_on_first_comma():
    mime, encoding, payload = split_data_uri("data:text/csv;base64,a,b,c")
    assert (mime, encoding, payload) == ("text/csv", "base64", "a,b,c")


@pytest.mark.parametrize("uri", [
    "data:application/octet-stream,QUJD",
    "data:application/octet-stream;utf8,QUJD",
    "data:application/octet-stream;base64",
])
def test_unsupported_data_uris(uri):
    with pytest.raises(UnsupportedDataURIError):
        decode_data_uri(uri)


def test_corrupt_base64_payload():
    with pytest.raises(FormatError):
        decode_data_uri("data:application/octet-stream;base64,Q")
