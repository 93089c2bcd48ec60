"""Tests for document image obfuscation."""

from tripkeeper.processing import obfuscation


def test_round_trip_text():
    payload = "data:image/jpeg;base64,/9j/4AAQSkZJRg=="
    encoded = obfuscation.encode(payload)
    assert encoded.startswith("encrypted:")
    assert encoded != payload
    assert obfuscation.decode(encoded) == payload


def test_round_trip_bytes():
    payload = bytes(range(256))
    assert obfuscation.decode_bytes(obfuscation.encode(payload)) == payload


def test_unmarked_value_passes_through():
    assert obfuscation.decode("data:image/png;base64,AAAA") == "data:image/png;base64,AAAA"
    assert obfuscation.decode_bytes("plain") == b"plain"
    assert not obfuscation.is_obfuscated("plain")
    assert not obfuscation.is_obfuscated(None)


def test_malformed_payload_decodes_to_none():
    assert obfuscation.decode("encrypted:***not base64***") is None
    assert obfuscation.decode_bytes("encrypted:abc") is None


def test_binary_payload_is_not_text():
    assert obfuscation.decode(obfuscation.encode(b"\xff\xfe\xfd")) is None
