#!/usr/bin/env python3

"""Integration tests for the pyelftools debug-info adapter.

The DWARF here is assembled byte by byte (see tests.builders) and decoded by
pyelftools, so these tests exercise the real library end to end.
"""

import pytest

from coff_dwarf_mapper.domain.errors import MalformedDebugInfo, UnsupportedAttributeShape
from coff_dwarf_mapper.domain.models.dwarf.tag_constants import (
    DW_AT_DATA_MEMBER_LOCATION,
    DW_AT_LOCATION,
    DW_AT_NAME,
)
from coff_dwarf_mapper.domain.services.container import CoffFile
from coff_dwarf_mapper.domain.services.parsing import LocationKind, Mapper
from coff_dwarf_mapper.infrastructure.dwarf import load_debug_info

from tests.builders import (
    addr_expression,
    build_coff,
    build_debug_abbrev,
    build_debug_info,
    build_dwarf_coff,
    plus_uconst_expression,
)


@pytest.fixture
def container() -> CoffFile:
    return CoffFile.parse(build_dwarf_coff())


def entries_by_name(container: CoffFile) -> dict:
    source = load_debug_info(container)
    unit = next(iter(source.iter_units()))
    top = unit.top_entry()
    found = {}
    for entry in top.children():
        found[entry.name()] = entry
        for child in entry.children():
            found[child.name()] = child
    return found


@pytest.mark.integration
class TestElftoolsEntries:
    """Attribute access through the adapter."""

    def test_single_unit(self, container: CoffFile) -> None:
        units = list(load_debug_info(container).iter_units())

        assert len(units) == 1
        assert units[0].offset == 0
        assert units[0].length == len(container.section_data(".debug_info"))
        assert units[0].evaluator.address_size == 4

    def test_top_entry(self, container: CoffFile) -> None:
        unit = next(iter(load_debug_info(container).iter_units()))
        top = unit.top_entry()

        assert top.tag == "DW_TAG_compile_unit"
        assert top.name() == "test.c"
        assert top.type_offset() is None

    def test_names_and_tags(self, container: CoffFile) -> None:
        entries = entries_by_name(container)

        assert entries["int"].tag == "DW_TAG_base_type"
        assert entries["point"].tag == "DW_TAG_structure_type"
        assert entries["x"].tag == "DW_TAG_member"
        assert entries["point_t"].tag == "DW_TAG_typedef"
        assert entries["origin"].tag == "DW_TAG_variable"

    def test_references_are_section_offsets(self, container: CoffFile) -> None:
        entries = entries_by_name(container)

        assert entries["x"].type_offset() == entries["int"].offset
        assert entries["point_t"].type_offset() == entries["point"].offset
        assert entries["origin"].type_offset() == entries["point_t"].offset

    def test_locations(self, container: CoffFile) -> None:
        entries = entries_by_name(container)

        assert entries["x"].location(DW_AT_DATA_MEMBER_LOCATION) == 0
        assert entries["y"].location(DW_AT_DATA_MEMBER_LOCATION) == plus_uconst_expression(4)
        assert entries["origin"].location(DW_AT_LOCATION) == addr_expression(0x1000)
        assert entries["int"].location(DW_AT_LOCATION) is None

    def test_presence(self, container: CoffFile) -> None:
        entries = entries_by_name(container)

        assert entries["origin"].has_attribute(DW_AT_NAME)
        assert not entries["origin"].has_attribute(DW_AT_DATA_MEMBER_LOCATION)

    def test_name_is_not_a_reference(self, container: CoffFile) -> None:
        entries = entries_by_name(container)

        with pytest.raises(UnsupportedAttributeShape):
            entries["x"].referenced_entry(DW_AT_NAME)

    def test_evaluator_reads_unit_encoding(self, container: CoffFile) -> None:
        unit = next(iter(load_debug_info(container).iter_units()))
        entries = entries_by_name(container)

        result = unit.evaluator.evaluate(entries["counter"].location(DW_AT_LOCATION))

        assert result.kind is LocationKind.RELOCATED_ADDRESS
        assert result.value == 0x2000


@pytest.mark.integration
class TestLoadDebugInfo:
    """Section lookup and fallbacks."""

    def test_missing_debug_sections_yield_no_units(self, caplog: pytest.LogCaptureFixture) -> None:
        container = CoffFile.parse(build_coff([(".text", b"\x00" * 8)]))

        source = load_debug_info(container)

        assert list(source.iter_units()) == []
        assert "No .debug_info section" in caplog.text

    def test_walk_collects_program(self, container: CoffFile) -> None:
        types = Mapper().process(load_debug_info(container))

        assert sorted(types.base_types.values()) == ["int"]
        assert [s.name for s in types.structs.values()] == ["point"]
        assert [t.name for t in types.typedefs.values()] == ["point_t"]
        assert [(g.name, g.address) for g in types.globals] == [
            ("origin", 0x1000),
            ("counter", 0x2000),
        ]
        members = next(iter(types.structs.values())).members
        assert [(m.name, m.member_offset) for m in members] == [("x", 0), ("y", 4)]

    def test_optional_sections_are_passed_only_when_present(self, container: CoffFile) -> None:
        dwarf_info = load_debug_info(container).dwarf_info

        assert dwarf_info.debug_info_sec.size == len(container.section_data(".debug_info"))
        assert dwarf_info.debug_str_sec is None
        assert dwarf_info.debug_line_sec is None

    def test_required_sections_are_empty_when_missing(self) -> None:
        container = CoffFile.parse(build_coff([(".text", b"\x00" * 8)]))

        dwarf_info = load_debug_info(container).dwarf_info

        assert dwarf_info.debug_info_sec.size == 0
        assert dwarf_info.debug_abbrev_sec.size == 0

    def test_undeclared_abbreviation_code(self) -> None:
        info = bytearray(build_debug_info())
        # Abbreviation code of the unit's top entry
        info[11] = 0x7F
        container = CoffFile.parse(
            build_coff([(".debug_abbrev", build_debug_abbrev()), (".debug_info", bytes(info))])
        )
        unit = next(iter(load_debug_info(container).iter_units()))

        with pytest.raises(MalformedDebugInfo, match="undeclared abbreviation"):
            unit.top_entry()
