"""Unit tests for the leaf binary codec."""

from __future__ import annotations

import struct

import pytest

from core.errors import CorruptError, TypeMismatchError
from core.types import LazyType, ResolvedPath
from store.data_codec import decode_value, encode_value, read_tag


@pytest.mark.parametrize(
    ("lazy_type", "value"),
    [
        (LazyType.BOOL, True),
        (LazyType.U8, 255),
        (LazyType.U16, 3908),
        (LazyType.U32, 4_000_000_000),
        (LazyType.U64, 2**64 - 1),
        (LazyType.I8, -128),
        (LazyType.I16, -1234),
        (LazyType.I32, -1234),
        (LazyType.I64, -(2**63)),
        (LazyType.F32, -1.25),
        (LazyType.F64, 123141234.1234),
        (LazyType.STRING, "Hello world! é世"),
        (LazyType.BYTES, bytes([12, 234, 48, 128])),
    ],
)
def test_roundtrip_preserves_value(lazy_type: LazyType, value: object) -> None:
    """Decoding an encoded value should return the exact original."""
    data = encode_value(lazy_type, value)

    assert decode_value(data, lazy_type) == value


def test_f32_roundtrip_is_bit_exact() -> None:
    """F32 values should decode to the nearest single-precision value."""
    expected = struct.unpack(">f", struct.pack(">f", 123.234))[0]

    decoded = decode_value(encode_value(LazyType.F32, 123.234), LazyType.F32)

    assert decoded == expected


def test_layout_is_tag_then_big_endian_payload() -> None:
    """Fixed-width leaves are the tag byte plus a big-endian payload."""
    assert encode_value(LazyType.U16, 0x0102) == b"\x03\x01\x02"
    assert encode_value(LazyType.BOOL, False) == b"\x01\x00"


def test_string_layout_has_u64_length_prefix() -> None:
    """String leaves carry an eight-byte length before the UTF-8 bytes."""
    assert encode_value(LazyType.STRING, "Hi") == b"\x0c" + (2).to_bytes(8, "big") + b"Hi"


def test_empty_string_and_bytes_roundtrip() -> None:
    """Zero-length payloads should survive encoding."""
    assert decode_value(encode_value(LazyType.STRING, ""), LazyType.STRING) == ""
    assert decode_value(encode_value(LazyType.BYTES, b""), LazyType.BYTES) == b""


def test_void_has_no_payload() -> None:
    """Void leaves are a bare tag."""
    data = encode_value(LazyType.VOID, None)

    assert data == b"\x00"
    assert decode_value(data, LazyType.VOID) is None


def test_array_roundtrip_keeps_element_type() -> None:
    """Numeric arrays should decode to the same list."""
    data = encode_value(LazyType.ARRAY, [1, -2, 300], LazyType.I16)

    assert decode_value(data, LazyType.ARRAY, LazyType.I16) == [1, -2, 300]
    assert decode_value(data, LazyType.ARRAY) == [1, -2, 300]


def test_array_element_mismatch_raises() -> None:
    """Requesting the wrong element type should be a type mismatch."""
    data = encode_value(LazyType.ARRAY, [1, 2], LazyType.U8)

    with pytest.raises(TypeMismatchError):
        decode_value(data, LazyType.ARRAY, LazyType.U32)


def test_array_requires_numeric_element_type() -> None:
    """Arrays of strings are not part of the format."""
    with pytest.raises(TypeMismatchError):
        encode_value(LazyType.ARRAY, ["a"], LazyType.STRING)


def test_decode_with_wrong_tag_raises_type_mismatch() -> None:
    """A U8 leaf must not decode as String."""
    data = encode_value(LazyType.U8, 21)

    with pytest.raises(TypeMismatchError):
        decode_value(data, LazyType.STRING)


@pytest.mark.parametrize(
    ("lazy_type", "value"),
    [
        (LazyType.U8, 256),
        (LazyType.U8, -1),
        (LazyType.I8, 128),
        (LazyType.U32, 1.5),
        (LazyType.I32, True),
        (LazyType.BOOL, 1),
        (LazyType.STRING, b"bytes"),
        (LazyType.BYTES, "text"),
        (LazyType.F32, 1e300),
        (LazyType.F64, "1.0"),
        (LazyType.VOID, 0),
    ],
)
def test_encode_rejects_values_that_do_not_fit(lazy_type: LazyType, value: object) -> None:
    """Out-of-range or wrongly typed values should be rejected."""
    with pytest.raises(TypeMismatchError):
        encode_value(lazy_type, value)


def test_truncated_fixed_width_payload_is_corrupt() -> None:
    """A U32 leaf with fewer than four payload bytes is corrupt."""
    data = encode_value(LazyType.U32, 7)[:-1]

    with pytest.raises(CorruptError):
        decode_value(data, LazyType.U32)


def test_trailing_bytes_are_corrupt() -> None:
    """Payloads longer than their tag allows are corrupt."""
    data = encode_value(LazyType.U8, 7) + b"\x00"

    with pytest.raises(CorruptError):
        decode_value(data, LazyType.U8)


def test_truncated_string_body_is_corrupt() -> None:
    """A string shorter than its length prefix is corrupt."""
    data = encode_value(LazyType.STRING, "Blue")[:-2]

    with pytest.raises(CorruptError):
        decode_value(data, LazyType.STRING)


def test_truncated_length_prefix_is_corrupt() -> None:
    """A bytes leaf cut inside its length prefix is corrupt."""
    with pytest.raises(CorruptError):
        decode_value(b"\x0d\x00\x00", LazyType.BYTES)


def test_invalid_utf8_is_corrupt() -> None:
    """String payloads must be valid UTF-8."""
    data = b"\x0c" + (1).to_bytes(8, "big") + b"\xff"

    with pytest.raises(CorruptError):
        decode_value(data, LazyType.STRING)


def test_invalid_bool_byte_is_corrupt() -> None:
    """Bool payload bytes other than 0 and 1 are corrupt."""
    with pytest.raises(CorruptError):
        decode_value(b"\x01\x02", LazyType.BOOL)


def test_read_tag_rejects_empty_and_unknown() -> None:
    """Empty leaves and unknown tags are corrupt."""
    with pytest.raises(CorruptError):
        read_tag(b"")
    with pytest.raises(CorruptError):
        read_tag(b"\xfe")

    assert read_tag(b"\x02\x15") is LazyType.U8


def test_link_stores_canonical_path_text() -> None:
    """Links carry the anchored path text behind a u64 length prefix."""
    data = encode_value(LazyType.LINK, ResolvedPath(containers=("people",), leaf="count"))

    assert data == b"\x0f" + (14).to_bytes(8, "big") + b"/people::count"
    assert decode_value(data, LazyType.LINK) == ResolvedPath(("people",), "count")


def test_link_rejects_non_path_values() -> None:
    """Only path strings and resolved paths can be linked."""
    with pytest.raises(TypeMismatchError):
        encode_value(LazyType.LINK, 42)


def test_link_with_malformed_path_is_corrupt() -> None:
    """A stored link whose text is not a valid path is corrupt."""
    data = b"\x0f" + (4).to_bytes(8, "big") + b"/a//"

    with pytest.raises(CorruptError):
        decode_value(data, LazyType.LINK)
