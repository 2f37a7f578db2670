#!/usr/bin/env python3

"""Unit tests for section name resolution and the byte field reader."""

import struct

import pytest

from coff_dwarf_mapper.domain.errors import MalformedContainer, UnresolvedName
from coff_dwarf_mapper.domain.services.container import (
    check_table_length,
    read_u16,
    read_u32,
    resolve_name,
    slice_range,
)

from tests.builders import encode_inline_name, encode_table_reference


def _table(*names: bytes) -> bytes:
    body = b"".join(name + b"\x00" for name in names)
    return struct.pack("<I", 4 + len(body)) + body


@pytest.mark.unit
class TestResolveName:
    """Inline and string-table names."""

    @pytest.mark.parametrize("name", ["a", ".text", ".cinit", "1234567", "12345678"])
    def test_inline_names(self, name: str) -> None:
        assert resolve_name(encode_inline_name(name), b"") == name

    def test_inline_name_stops_at_nul(self) -> None:
        assert resolve_name(b".bss\x00xyz", b"") == ".bss"

    def test_table_reference(self) -> None:
        table = _table(b".debug_info", b".debug_abbrev")

        assert resolve_name(encode_table_reference(4), table) == ".debug_info"
        assert resolve_name(encode_table_reference(16), table) == ".debug_abbrev"

    def test_reference_into_middle_of_string(self) -> None:
        table = _table(b".debug_info")
        assert resolve_name(encode_table_reference(11), table) == "info"

    def test_unterminated_string_runs_to_table_end(self) -> None:
        table = struct.pack("<I", 13) + b".debug_x"
        assert resolve_name(encode_table_reference(4), table) == ".debug_x"

    def test_offset_out_of_range(self) -> None:
        with pytest.raises(UnresolvedName, match="out of range"):
            resolve_name(encode_table_reference(100), _table(b".text"))

    def test_invalid_text(self) -> None:
        with pytest.raises(UnresolvedName):
            resolve_name(b"\xff\xfe\x00\x00\x00\x00\x00\x00", b"")

    def test_invalid_text_in_table(self) -> None:
        table = struct.pack("<I", 7) + b"\xc3\x28\x00"
        with pytest.raises(UnresolvedName):
            resolve_name(encode_table_reference(4), table)

    def test_field_must_be_eight_bytes(self) -> None:
        with pytest.raises(UnresolvedName):
            resolve_name(b".text", b"")


@pytest.mark.unit
class TestCheckTableLength:
    def test_consistent(self) -> None:
        assert check_table_length(_table(b".debug_info")) is True

    def test_mismatch_is_only_a_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        assert check_table_length(_table(b".debug_info") + b"\x00\x00") is False
        assert "String table declares" in caplog.text

    def test_short_table(self) -> None:
        assert check_table_length(b"") is True


@pytest.mark.unit
class TestByteReader:
    def test_little_endian_reads(self) -> None:
        data = b"\x34\x12\x78\x56\x34\x12"
        assert read_u16(data, 0) == 0x1234
        assert read_u32(data, 2) == 0x12345678

    @pytest.mark.parametrize("offset", [-1, 5, 6])
    def test_u16_out_of_range(self, offset: int) -> None:
        with pytest.raises(MalformedContainer):
            read_u16(b"\x00" * 6, offset)

    def test_u32_out_of_range(self) -> None:
        with pytest.raises(MalformedContainer):
            read_u32(b"\x00" * 6, 3)

    def test_slice_range(self) -> None:
        view = slice_range(b"abcdef", 2, 3, "Test")
        assert bytes(view) == b"cde"

    def test_slice_range_overrun(self) -> None:
        with pytest.raises(MalformedContainer, match="Test"):
            slice_range(b"abcdef", 4, 3, "Test")
