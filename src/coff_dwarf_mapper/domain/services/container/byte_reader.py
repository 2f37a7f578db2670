#!/usr/bin/env python3

"""Little-endian fixed-width field extraction."""

import struct

from ...errors import MalformedContainer

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


def _check_range(data: bytes | memoryview, offset: int, width: int) -> None:
    if offset < 0 or offset + width > len(data):
        raise MalformedContainer(
            f"Read of {width} bytes at offset {offset} exceeds buffer of {len(data)} bytes"
        )


def read_u16(data: bytes | memoryview, offset: int) -> int:
    """Read an unsigned 16-bit little-endian integer."""
    _check_range(data, offset, _U16.size)
    return int(_U16.unpack_from(data, offset)[0])


def read_u32(data: bytes | memoryview, offset: int) -> int:
    """Read an unsigned 32-bit little-endian integer."""
    _check_range(data, offset, _U32.size)
    return int(_U32.unpack_from(data, offset)[0])


def slice_range(data: bytes | memoryview, start: int, length: int, what: str) -> memoryview:
    """Borrow ``data[start:start + length]``, failing if it overruns the buffer."""
    if start < 0 or length < 0 or start + length > len(data):
        raise MalformedContainer(
            f"{what} [{start}, {start + length}) lies outside the {len(data)} byte file"
        )
    return memoryview(data)[start : start + length]
