"""Protocol buffer wire format primitives used by generated codecs.

Generated modules only call three functions from here:

    decode(data, default, dispatch)  -- fold wire entries through dispatch
    encode(number, wire_type, value) -- frame one value as a wire entry
    cast(wire_type, entry)           -- normalize a decoded entry

Decoded entries are tagged by shape (Varint, Fixed64, LengthEncoded,
Fixed32) so generated dispatch functions can pattern-match on them.
"""

import struct
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, TypeVar


class WireError(RuntimeError):
    """Base exception for wire format errors."""


class DecodeError(WireError):
    """Raised when wire data cannot be decoded."""


class EncodeError(WireError):
    """Raised when a value cannot be encoded."""


# Wire type numbers carried in the low three bits of an entry key
VARINT = 0
FIXED64 = 1
LENGTH_DELIMITED = 2
START_GROUP = 3
END_GROUP = 4
FIXED32 = 5

_MASK32 = (1 << 32) - 1
_MASK64 = (1 << 64) - 1


@dataclass(frozen=True, slots=True)
class Varint:
    """A varint-encoded entry."""

    value: int


@dataclass(frozen=True, slots=True)
class Fixed64:
    """An 8-byte little-endian entry."""

    data: bytes


@dataclass(frozen=True, slots=True)
class LengthEncoded:
    """A length-delimited entry: string, bytes, message or packed scalars."""

    data: bytes


@dataclass(frozen=True, slots=True)
class Fixed32:
    """A 4-byte little-endian entry."""

    data: bytes


WireEntry = Varint | Fixed64 | LengthEncoded | Fixed32

VARINT_TYPES = frozenset(
    ["int32", "int64", "uint32", "uint64", "sint32", "sint64", "bool", "enum"]
)

FIXED32_FORMATS = {"fixed32": "<I", "sfixed32": "<i", "float": "<f"}

FIXED64_FORMATS = {"fixed64": "<Q", "sfixed64": "<q", "double": "<d"}

LENGTH_ENCODED_TYPES = frozenset(["length_encoded", "string", "bytes"])

PACKABLE_TYPES = VARINT_TYPES | frozenset(FIXED32_FORMATS) | frozenset(FIXED64_FORMATS)

# Accepted ranges for varint-encoded integer types
_RANGES = {
    "int32": (-(1 << 31), (1 << 31) - 1),
    "enum": (-(1 << 31), (1 << 31) - 1),
    "sint32": (-(1 << 31), (1 << 31) - 1),
    "uint32": (0, _MASK32),
    "int64": (-(1 << 63), (1 << 63) - 1),
    "sint64": (-(1 << 63), (1 << 63) - 1),
    "uint64": (0, _MASK64),
}

T = TypeVar("T")


def encode_varint(value: int) -> bytes:
    """Encode an integer as a base-128 varint.

    Negative values are encoded as their 64-bit two's complement.
    """
    if value < 0:
        value &= _MASK64
    out = bytearray()
    while True:
        bits = value & 0x7F
        value >>= 7
        if value:
            out.append(bits | 0x80)
        else:
            out.append(bits)
            return bytes(out)


def decode_varint(data: bytes | memoryview, offset: int = 0) -> tuple[int, int]:
    """Decode a varint starting at offset.

    Returns:
        Tuple of (value, offset just past the varint).
    """
    result = 0
    shift = 0
    pos = offset
    while True:
        if pos >= len(data):
            raise DecodeError("truncated varint")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, pos
        shift += 7
        if shift >= 70:
            raise DecodeError("varint exceeds 10 bytes")


def zigzag_encode(value: int) -> int:
    return value << 1 if value >= 0 else ((-value) << 1) - 1


def zigzag_decode(value: int) -> int:
    return (value >> 1) ^ -(value & 1)


def _to_signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _key(number: int, wire_type: int) -> bytes:
    return encode_varint((number << 3) | wire_type)


def _take(data: bytes | memoryview, offset: int, size: int) -> tuple[bytes, int]:
    end = offset + size
    if end > len(data):
        raise DecodeError(f"truncated entry: need {size} bytes at offset {offset}")
    return bytes(data[offset:end]), end


def _skip_group(data: bytes | memoryview, offset: int, number: int) -> int:
    """Skip a group body, returning the offset past its END_GROUP key."""
    while True:
        key, offset = decode_varint(data, offset)
        inner, wire_type = key >> 3, key & 7
        if wire_type == END_GROUP:
            if inner != number:
                raise DecodeError(f"mismatched end of group {inner}, expected {number}")
            return offset
        _, offset = _read_entry(data, offset, inner, wire_type)


def _read_entry(
    data: bytes | memoryview, offset: int, number: int, wire_type: int
) -> tuple[WireEntry | None, int]:
    """Read one entry payload. Groups are skipped and yield None."""
    if wire_type == VARINT:
        value, offset = decode_varint(data, offset)
        return Varint(value), offset
    if wire_type == FIXED64:
        raw, offset = _take(data, offset, 8)
        return Fixed64(raw), offset
    if wire_type == LENGTH_DELIMITED:
        length, offset = decode_varint(data, offset)
        raw, offset = _take(data, offset, length)
        return LengthEncoded(raw), offset
    if wire_type == FIXED32:
        raw, offset = _take(data, offset, 4)
        return Fixed32(raw), offset
    if wire_type == START_GROUP:
        return None, _skip_group(data, offset, number)
    if wire_type == END_GROUP:
        raise DecodeError(f"unexpected end of group {number}")
    raise DecodeError(f"unknown wire type {wire_type} for field {number}")


def iter_entries(data: bytes | memoryview) -> Iterator[tuple[int, WireEntry]]:
    """Iterate over the (field number, entry) pairs of a message body."""
    offset = 0
    while offset < len(data):
        key, offset = decode_varint(data, offset)
        number, wire_type = key >> 3, key & 7
        if number == 0:
            raise DecodeError(f"invalid field number 0 at offset {offset}")
        entry, offset = _read_entry(data, offset, number, wire_type)
        if entry is not None:
            yield number, entry


def decode(
    data: bytes | memoryview, default: T, dispatch: Callable[[int, WireEntry, T], T]
) -> T:
    """Fold every entry of a message body through a dispatch function.

    Args:
        data: The encoded message body.
        default: The value to start from (all fields unset).
        dispatch: Called as dispatch(number, entry, value) for each entry and
            returns the updated value.

    Returns:
        The value after the last entry has been dispatched.
    """
    value = default
    for number, entry in iter_entries(data):
        value = dispatch(number, entry, value)
    return value


def _varint_value(wire_type: str, value: Any) -> int:
    if wire_type == "bool":
        return 1 if value else 0
    low, high = _RANGES[wire_type]
    if not low <= value <= high:
        raise EncodeError(f"{value} out of range for {wire_type}")
    if wire_type in ("sint32", "sint64"):
        return zigzag_encode(value)
    return value


def _from_varint(wire_type: str, value: int) -> Any:
    match wire_type:
        case "bool":
            return value != 0
        case "int32" | "enum":
            return _to_signed(value, 32)
        case "int64":
            return _to_signed(value, 64)
        case "uint32":
            return value & _MASK32
        case "uint64":
            return value & _MASK64
        case "sint32":
            return zigzag_decode(value & _MASK32)
        case "sint64":
            return zigzag_decode(value & _MASK64)
    raise DecodeError(f"{wire_type} is not a varint type")


def _encode_scalar(wire_type: str, value: Any) -> bytes:
    """Encode a scalar payload without its key."""
    try:
        if wire_type in VARINT_TYPES:
            return encode_varint(_varint_value(wire_type, value))
        if wire_type in FIXED32_FORMATS:
            return struct.pack(FIXED32_FORMATS[wire_type], value)
        if wire_type in FIXED64_FORMATS:
            return struct.pack(FIXED64_FORMATS[wire_type], value)
    except struct.error as e:
        raise EncodeError(f"cannot encode {value!r} as {wire_type}: {e}") from e
    raise EncodeError(f"unknown wire type {wire_type}")


def _wire_type_of(wire_type: str) -> int:
    if wire_type in VARINT_TYPES:
        return VARINT
    if wire_type in FIXED32_FORMATS:
        return FIXED32
    if wire_type in FIXED64_FORMATS:
        return FIXED64
    if wire_type in LENGTH_ENCODED_TYPES:
        return LENGTH_DELIMITED
    raise EncodeError(f"unknown wire type {wire_type}")


def encode(number: int, wire_type: str, value: Any) -> bytes:
    """Encode one value as a complete wire entry (key and payload).

    A value of None is absent and encodes to no bytes at all.
    """
    if value is None:
        return b""
    if wire_type in LENGTH_ENCODED_TYPES:
        payload = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        return _key(number, LENGTH_DELIMITED) + encode_varint(len(payload)) + payload
    return _key(number, _wire_type_of(wire_type)) + _encode_scalar(wire_type, value)


def encode_packed(number: int, wire_type: str, values: list[Any]) -> bytes:
    """Encode a sequence of scalars as one packed, length-delimited entry."""
    if wire_type not in PACKABLE_TYPES:
        raise EncodeError(f"{wire_type} cannot be packed")
    if not values:
        return b""
    payload = b"".join(_encode_scalar(wire_type, v) for v in values)
    return _key(number, LENGTH_DELIMITED) + encode_varint(len(payload)) + payload


def _iter_packed(wire_type: str, data: bytes) -> Iterator[Any]:
    if wire_type in VARINT_TYPES:
        offset = 0
        while offset < len(data):
            value, offset = decode_varint(data, offset)
            yield _from_varint(wire_type, value)
        return

    fmt = FIXED32_FORMATS.get(wire_type) or FIXED64_FORMATS.get(wire_type)
    if fmt is None:
        raise DecodeError(f"{wire_type} cannot be packed")
    if len(data) % struct.calcsize(fmt):
        raise DecodeError(f"packed {wire_type} data has invalid length {len(data)}")
    for (value,) in struct.iter_unpack(fmt, data):
        yield value


def cast(wire_type: str, entry: WireEntry) -> Any:
    """Normalize a decoded entry to the field's declared type.

    A LengthEncoded entry cast to a packable scalar type is a packed
    aggregate and yields a list of elements.
    """
    match entry:
        case LengthEncoded(data):
            if wire_type == "string":
                try:
                    return data.decode("utf-8")
                except UnicodeDecodeError as e:
                    raise DecodeError(f"invalid UTF-8 in string: {e}") from e
            if wire_type in ("bytes", "length_encoded"):
                return data
            return list(_iter_packed(wire_type, data))
        case Varint(value):
            return _from_varint(wire_type, value)
        case Fixed32(data):
            if wire_type not in FIXED32_FORMATS:
                raise DecodeError(f"fixed32 entry cannot be read as {wire_type}")
            return struct.unpack(FIXED32_FORMATS[wire_type], data)[0]
        case Fixed64(data):
            if wire_type not in FIXED64_FORMATS:
                raise DecodeError(f"fixed64 entry cannot be read as {wire_type}")
            return struct.unpack(FIXED64_FORMATS[wire_type], data)[0]
    raise DecodeError(f"unknown entry {entry!r}")
