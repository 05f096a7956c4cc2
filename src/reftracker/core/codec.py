"""Binary layout of tracker objects.

All integers are unsigned 32-bit big-endian.

Schema version 1:

    location                  type     name
    ------------------------  -------  --------------
    attribute SCHEMA_VERSION  uint32   schema_version
    payload bytes 0..3        uint32   refcount

The tracked keys live in the object's key sub-map, each mapped to an empty
value. ``refcount`` always equals the size of that sub-map. The store's own
object version is the compare-and-swap token, so the payload carries no
generation counter.
"""

from __future__ import annotations

import struct

from reftracker.core.errors import DecodeError

SCHEMA_VERSION_ATTR = "reftracker.schema-version"
CURRENT_SCHEMA_VERSION = 1

_U32 = struct.Struct(">I")
U32_MAX = 2**32 - 1

SCHEMA_VERSION_SIZE = _U32.size
REFCOUNT_SIZE = _U32.size


def encode_u32(value: int) -> bytes:
    """Encode an unsigned 32-bit integer in network byte order.

    Raises:
        ValueError: If value does not fit in 32 unsigned bits.
    """
    if not 0 <= value <= U32_MAX:
        raise ValueError(f"{value} does not fit in an unsigned 32-bit integer")
    return _U32.pack(value)


def decode_u32(data: bytes, field: str = "value") -> int:
    """Decode an unsigned 32-bit big-endian integer.

    Raises:
        DecodeError: If data is not exactly four bytes long.
    """
    if len(data) != _U32.size:
        raise DecodeError(
            f"{field}: expected {_U32.size} bytes, got {len(data)}"
        )
    return _U32.unpack(data)[0]


def encode_schema_version(version: int) -> bytes:
    return encode_u32(version)


def decode_schema_version(data: bytes) -> int:
    return decode_u32(data, "schema version")


def encode_refcount(refcount: int) -> bytes:
    return encode_u32(refcount)


def decode_refcount(data: bytes) -> int:
    return decode_u32(data, "refcount")
