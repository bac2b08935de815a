"""
Themis Serialization Utilities

Fixed-width codecs for account layouts. Integers are BIG-ENDIAN; points and
scalars are written as their canonical 32-byte encodings.

Reads are bounds-checked: a truncated buffer raises DecodeError instead of
returning a short slice.
"""

from __future__ import annotations
from typing import Tuple

from themis.constants import BIG_ENDIAN
from themis.errors import AccountDataTooSmallError, DecodeError


# ==============================================================================
# Integer Serialization (Big-Endian)
# ==============================================================================

def serialize_u8(value: int) -> bytes:
    """Serialize unsigned 8-bit integer."""
    if not 0 <= value <= 0xFF:
        raise ValueError(f"u8 value out of range: {value}")
    return bytes([value])


def serialize_u16(value: int) -> bytes:
    """Serialize unsigned 16-bit integer (big-endian)."""
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"u16 value out of range: {value}")
    return value.to_bytes(2, BIG_ENDIAN)


def serialize_u32(value: int) -> bytes:
    """Serialize unsigned 32-bit integer (big-endian)."""
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"u32 value out of range: {value}")
    return value.to_bytes(4, BIG_ENDIAN)


def serialize_bool(value: bool) -> bytes:
    """Serialize boolean as a single 0/1 byte."""
    return b"\x01" if value else b"\x00"


# ==============================================================================
# Deserialization
# ==============================================================================

def _slice(data: bytes, offset: int, size: int) -> bytes:
    if offset < 0 or offset + size > len(data):
        raise DecodeError(
            f"Unexpected end of data: need {size} bytes at offset {offset}, have {len(data)}",
            {"offset": offset, "size": size, "length": len(data)}
        )
    return bytes(data[offset:offset + size])


def deserialize_u8(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize unsigned 8-bit integer.
    Returns (value, bytes_consumed).
    """
    return _slice(data, offset, 1)[0], 1


def deserialize_u16(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize unsigned 16-bit integer (big-endian).
    Returns (value, bytes_consumed).
    """
    return int.from_bytes(_slice(data, offset, 2), BIG_ENDIAN), 2


def deserialize_u32(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Deserialize unsigned 32-bit integer (big-endian).
    Returns (value, bytes_consumed).
    """
    return int.from_bytes(_slice(data, offset, 4), BIG_ENDIAN), 4


def deserialize_bool(data: bytes, offset: int = 0) -> Tuple[bool, int]:
    """
    Deserialize a strict boolean byte. Anything other than 0 or 1 is rejected.
    Returns (value, bytes_consumed).
    """
    value = _slice(data, offset, 1)[0]
    if value > 1:
        raise DecodeError(f"Invalid boolean byte {value:#04x} at offset {offset}")
    return value == 1, 1


def deserialize_fixed_bytes(data: bytes, size: int, offset: int = 0) -> Tuple[bytes, int]:
    """
    Deserialize fixed-length byte array.
    Returns (bytes_data, bytes_consumed).
    """
    return _slice(data, offset, size), size


# ==============================================================================
# Helper Functions
# ==============================================================================

def is_zeroed(data: bytes) -> bool:
    """True for an empty buffer or one holding only zero bytes."""
    return not any(data)


def fit_to_buffer(serialized: bytes, buffer_size: int) -> bytes:
    """
    Zero-pad a serialized layout to the caller's buffer size.

    A buffer of size 0 means "no preallocated buffer" and the layout is
    returned as is.
    """
    if buffer_size == 0 or buffer_size == len(serialized):
        return serialized
    if buffer_size < len(serialized):
        raise AccountDataTooSmallError(len(serialized), buffer_size)
    return serialized + bytes(buffer_size - len(serialized))


class ByteReader:
    """
    Helper class for sequential deserialization.
    """

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def read_u8(self) -> int:
        value, size = deserialize_u8(self.data, self.offset)
        self.offset += size
        return value

    def read_u16(self) -> int:
        value, size = deserialize_u16(self.data, self.offset)
        self.offset += size
        return value

    def read_u32(self) -> int:
        value, size = deserialize_u32(self.data, self.offset)
        self.offset += size
        return value

    def read_bool(self) -> bool:
        value, size = deserialize_bool(self.data, self.offset)
        self.offset += size
        return value

    def read_fixed_bytes(self, size: int) -> bytes:
        """Read fixed-length byte array."""
        value, size = deserialize_fixed_bytes(self.data, size, self.offset)
        self.offset += size
        return value

    def remaining(self) -> int:
        """Return number of bytes remaining."""
        return len(self.data) - self.offset

    def is_empty(self) -> bool:
        """Check if all bytes have been read."""
        return self.offset >= len(self.data)


class ByteWriter:
    """
    Helper class for sequential serialization.
    """

    def __init__(self):
        self.buffer = bytearray()

    def write_u8(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u8(value))
        return self

    def write_u16(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u16(value))
        return self

    def write_u32(self, value: int) -> "ByteWriter":
        self.buffer.extend(serialize_u32(value))
        return self

    def write_bool(self, value: bool) -> "ByteWriter":
        self.buffer.extend(serialize_bool(value))
        return self

    def write_raw(self, data: bytes) -> "ByteWriter":
        """Write raw bytes without length prefix."""
        self.buffer.extend(data)
        return self

    def to_bytes(self) -> bytes:
        """Return the serialized bytes."""
        return bytes(self.buffer)

    def __len__(self) -> int:
        return len(self.buffer)
