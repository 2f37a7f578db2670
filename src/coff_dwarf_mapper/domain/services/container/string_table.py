#!/usr/bin/env python3

"""Section name decoding against the COFF string table.

A name field is 8 bytes. A non-zero first byte means the name is stored
inline, NUL padded. Otherwise bytes 4..8 hold an offset into the string
table, where the name runs up to the next NUL.
"""

from ....infrastructure.logging import get_logger
from ...errors import UnresolvedName
from .byte_reader import read_u32

logger = get_logger(__name__)

NAME_FIELD_SIZE = 8


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise UnresolvedName(f"Name bytes {raw!r} are not valid text") from e


def resolve_name(field: bytes | memoryview, string_table: bytes | memoryview) -> str:
    """Decode an 8-byte name field.

    Raises:
        UnresolvedName: bad string-table offset or undecodable bytes
    """
    field = bytes(field)
    if len(field) != NAME_FIELD_SIZE:
        raise UnresolvedName(f"Name field must be {NAME_FIELD_SIZE} bytes, got {len(field)}")

    if field[0] != 0:
        return _decode(field.split(b"\x00", 1)[0])

    offset = read_u32(field, 4)
    if offset >= len(string_table):
        raise UnresolvedName(
            f"String table offset {offset} out of range (table is {len(string_table)} bytes)"
        )

    table = bytes(string_table)
    end = table.find(b"\x00", offset)
    if end < 0:
        end = len(table)
    return _decode(table[offset:end])


def check_table_length(string_table: bytes | memoryview) -> bool:
    """Compare the table's leading length word against its real size.

    Returns True when the table is consistent or too short to carry a
    length word.
    """
    if len(string_table) < 4:
        return True
    declared = read_u32(string_table, 0)
    if declared != len(string_table):
        logger.warning(
            f"String table declares {declared} bytes but {len(string_table)} bytes follow "
            f"the symbol table"
        )
        return False
    return True
