"""Self-describing binary encoding for leaf values.

Every leaf is one tag byte followed by a payload. Fixed-width types
carry their exact-width big-endian payload, String and Bytes carry a
u64 length prefix, numeric arrays carry an element tag, a u64 count
and the packed elements, and Link leaves carry a length-prefixed
canonical database path. This module never touches storage.
"""

from __future__ import annotations

import struct
from typing import Any, Sequence

from core.constants import LENGTH_PREFIX_FORMAT
from core.errors import CorruptError, InvalidPathError, TypeMismatchError
from core.types import LazyType, ResolvedPath
from store.path_resolver import format_path, parse_path

_FIXED_FORMATS: dict[LazyType, str] = {
    LazyType.U8: ">B",
    LazyType.U16: ">H",
    LazyType.U32: ">I",
    LazyType.U64: ">Q",
    LazyType.I8: ">b",
    LazyType.I16: ">h",
    LazyType.I32: ">i",
    LazyType.I64: ">q",
    LazyType.F32: ">f",
    LazyType.F64: ">d",
}
_FLOAT_TYPES = (LazyType.F32, LazyType.F64)
_LENGTH_PREFIX = struct.Struct(LENGTH_PREFIX_FORMAT)


def encode_value(
    lazy_type: LazyType,
    value: Any,
    element_type: LazyType | None = None,
) -> bytes:
    """Encode a value into tag + payload bytes.

    Args:
        lazy_type: Tag to encode under.
        value: Python value to encode.
        element_type: Element tag, required for ``LazyType.ARRAY``.

    Returns:
        Complete leaf bytes.

    Raises:
        TypeMismatchError: If the value does not fit the requested type.
    """
    tag = bytes((int(lazy_type),))
    if lazy_type is LazyType.VOID:
        if value is not None:
            raise TypeMismatchError(f"Void leaves carry no value, got {type(value).__name__}.")
        return tag
    if lazy_type is LazyType.BOOL:
        if not isinstance(value, bool):
            raise TypeMismatchError(f"Expected bool for Bool leaf, got {type(value).__name__}.")
        return tag + (b"\x01" if value else b"\x00")
    if lazy_type in _FIXED_FORMATS:
        return tag + _pack_number(lazy_type, value)
    if lazy_type is LazyType.STRING:
        if not isinstance(value, str):
            raise TypeMismatchError(f"Expected str for String leaf, got {type(value).__name__}.")
        try:
            payload = value.encode("utf-8")
        except UnicodeEncodeError as error:
            raise TypeMismatchError(f"String value is not encodable as UTF-8: {error}.") from error
        return tag + _LENGTH_PREFIX.pack(len(payload)) + payload
    if lazy_type is LazyType.BYTES:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeMismatchError(f"Expected bytes for Bytes leaf, got {type(value).__name__}.")
        payload = bytes(value)
        return tag + _LENGTH_PREFIX.pack(len(payload)) + payload
    if lazy_type is LazyType.ARRAY:
        return tag + _encode_array(element_type, value)
    if lazy_type is LazyType.LINK:
        payload = _link_text(value).encode("utf-8")
        return tag + _LENGTH_PREFIX.pack(len(payload)) + payload
    raise TypeMismatchError(f"Unsupported lazy type {lazy_type!r}.")


def read_tag(data: bytes) -> LazyType:
    """Read the type tag of encoded leaf bytes.

    Raises:
        CorruptError: If the leaf is empty or the tag is unknown.
    """
    if not data:
        raise CorruptError("Leaf is empty: missing type tag.")
    try:
        return LazyType(data[0])
    except ValueError as error:
        raise CorruptError(f"Leaf has unknown type tag {data[0]}.") from error


def decode_value(
    data: bytes,
    lazy_type: LazyType,
    element_type: LazyType | None = None,
) -> Any:
    """Decode leaf bytes, requiring a specific tag.

    Args:
        data: Complete leaf bytes.
        lazy_type: Tag the caller expects.
        element_type: Expected element tag for arrays; any when None.

    Returns:
        Decoded Python value.

    Raises:
        TypeMismatchError: If the stored tag differs from ``lazy_type``.
        CorruptError: If the payload is inconsistent with the tag.
    """
    stored_type = read_tag(data)
    if stored_type is not lazy_type:
        raise TypeMismatchError(
            f"Leaf holds {stored_type.name} but {lazy_type.name} was requested."
        )
    payload = data[1:]
    if lazy_type is LazyType.VOID:
        _expect_length(lazy_type, payload, 0)
        return None
    if lazy_type is LazyType.BOOL:
        _expect_length(lazy_type, payload, 1)
        if payload[0] not in (0, 1):
            raise CorruptError(f"Bool leaf has invalid payload byte {payload[0]}.")
        return payload[0] == 1
    if lazy_type in _FIXED_FORMATS:
        number_format = _FIXED_FORMATS[lazy_type]
        _expect_length(lazy_type, payload, struct.calcsize(number_format))
        return struct.unpack(number_format, payload)[0]
    if lazy_type is LazyType.ARRAY:
        return _decode_array(payload, element_type)
    body = _split_length_prefixed(lazy_type, payload)
    if lazy_type is LazyType.BYTES:
        return body
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as error:
        raise CorruptError(f"{lazy_type.name} leaf is not valid UTF-8: {error}.") from error
    if lazy_type is LazyType.LINK:
        return _parse_link(text)
    return text


def _pack_number(lazy_type: LazyType, value: Any) -> bytes:
    """Pack one fixed-width number, mapping range errors to type mismatches."""
    if isinstance(value, bool):
        raise TypeMismatchError(f"Expected a number for {lazy_type.name} leaf, got bool.")
    if lazy_type in _FLOAT_TYPES:
        if not isinstance(value, (int, float)):
            raise TypeMismatchError(
                f"Expected a float for {lazy_type.name} leaf, got {type(value).__name__}."
            )
    elif not isinstance(value, int):
        raise TypeMismatchError(
            f"Expected an int for {lazy_type.name} leaf, got {type(value).__name__}."
        )
    try:
        packed = struct.pack(_FIXED_FORMATS[lazy_type], value)
    except (struct.error, OverflowError) as error:
        raise TypeMismatchError(f"Value {value!r} does not fit {lazy_type.name}: {error}.") from error
    return packed


def _encode_array(element_type: LazyType | None, values: Sequence[Any]) -> bytes:
    if element_type not in _FIXED_FORMATS:
        raise TypeMismatchError(
            f"Array element type must be a fixed-width number, got {element_type!r}."
        )
    if isinstance(values, (str, bytes, bytearray)):
        raise TypeMismatchError("Array values must be a sequence of numbers.")
    try:
        items = list(values)
    except TypeError as error:
        raise TypeMismatchError("Array values must be a sequence of numbers.") from error
    packed = b"".join(_pack_number(element_type, item) for item in items)
    return bytes((int(element_type),)) + _LENGTH_PREFIX.pack(len(items)) + packed


def _decode_array(payload: bytes, element_type: LazyType | None) -> list[Any]:
    header_size = 1 + _LENGTH_PREFIX.size
    if len(payload) < header_size:
        raise CorruptError(f"Array leaf header is truncated ({len(payload)} bytes).")
    try:
        stored_element = LazyType(payload[0])
    except ValueError as error:
        raise CorruptError(f"Array leaf has unknown element tag {payload[0]}.") from error
    if stored_element not in _FIXED_FORMATS:
        raise CorruptError(f"Array leaf has non-numeric element tag {stored_element.name}.")
    if element_type is not None and stored_element is not element_type:
        raise TypeMismatchError(
            f"Array holds {stored_element.name} elements but {element_type.name} was requested."
        )
    (count,) = _LENGTH_PREFIX.unpack_from(payload, 1)
    element_format = _FIXED_FORMATS[stored_element]
    body = payload[header_size:]
    _expect_length(LazyType.ARRAY, body, count * struct.calcsize(element_format))
    return [item[0] for item in struct.iter_unpack(element_format, body)]


def _split_length_prefixed(lazy_type: LazyType, payload: bytes) -> bytes:
    if len(payload) < _LENGTH_PREFIX.size:
        raise CorruptError(f"{lazy_type.name} leaf length prefix is truncated.")
    (length,) = _LENGTH_PREFIX.unpack_from(payload)
    body = payload[_LENGTH_PREFIX.size :]
    _expect_length(lazy_type, body, length)
    return body


def _expect_length(lazy_type: LazyType, payload: bytes, expected: int) -> None:
    if len(payload) != expected:
        raise CorruptError(
            f"{lazy_type.name} leaf payload has {len(payload)} bytes, expected {expected}."
        )


def _link_text(value: Any) -> str:
    """Canonical text of a link target given as a path string or ResolvedPath."""
    if isinstance(value, str):
        value = parse_path(value)
    if not isinstance(value, ResolvedPath):
        raise TypeMismatchError(
            f"Expected a path or ResolvedPath for Link leaf, got {type(value).__name__}."
        )
    return format_path(value)


def _parse_link(text: str) -> ResolvedPath:
    try:
        return parse_path(text)
    except InvalidPathError as error:
        raise CorruptError(f"Link leaf holds an invalid path '{text}': {error}.") from error
