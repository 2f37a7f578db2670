#!/usr/bin/env python3

"""Integration tests for the map file generator pipeline."""

import json
import struct
from pathlib import Path
from unittest.mock import patch

import pytest

from coff_dwarf_mapper.application.generators import MapfileGenerator
from coff_dwarf_mapper.domain.errors import (
    MalformedContainer,
    MalformedDebugInfo,
    OutputIOFailure,
    UnsupportedAttributeShape,
)
from coff_dwarf_mapper.domain.models.mapfile import MapEntry
from coff_dwarf_mapper.domain.services.generation import loads

from tests.builders import build_coff, build_debug_abbrev, build_debug_info, build_dwarf_coff

EXPECTED = [
    {
        "addr": 0x1000,
        "type": "point_t",
        "name": "origin",
        "fields": [
            {"type": "int", "offset": 0, "name": "x"},
            {"type": "int", "offset": 4, "name": "y"},
        ],
    },
    {"addr": 0x2000, "type": "int", "name": "counter"},
]


@pytest.fixture
def coff_path(tmp_path: Path) -> Path:
    path = tmp_path / "firmware.out"
    path.write_bytes(build_dwarf_coff())
    return path


@pytest.mark.integration
class TestMapfileGenerator:
    """Whole pipeline over a real COFF image with DWARF 4 debug info."""

    def test_generate(self, coff_path: Path) -> None:
        with MapfileGenerator(coff_path) as generator:
            entries = generator.generate()

        assert [entry.to_dict() for entry in entries] == EXPECTED

    def test_write(self, coff_path: Path, tmp_path: Path) -> None:
        output = tmp_path / "firmware.map.json"

        with MapfileGenerator(coff_path) as generator:
            generator.write(output)

        assert json.loads(output.read_text(encoding="utf-8")) == EXPECTED
        assert loads(output.read_text(encoding="utf-8"))[1] == MapEntry(
            name="counter", addr=0x2000, type="int"
        )

    def test_exit_releases_buffer(self, coff_path: Path) -> None:
        with MapfileGenerator(coff_path) as generator:
            assert generator.container is not None

        assert generator.container is None
        assert generator.data is None

    def test_unreadable_input(self, tmp_path: Path) -> None:
        with pytest.raises(OutputIOFailure, match="Cannot read"):
            with MapfileGenerator(tmp_path / "missing.out"):
                pass

    def test_malformed_container(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.out"
        path.write_bytes(build_coff([(".text", b"\x01")], declared_section_count=40))

        with pytest.raises(MalformedContainer):
            with MapfileGenerator(path):
                pass

    def test_file_without_debug_info(self, tmp_path: Path) -> None:
        path = tmp_path / "stripped.out"
        path.write_bytes(build_coff([(".text", b"\x01\x02")]))

        with MapfileGenerator(path) as generator:
            assert generator.generate() == []

    def test_corrupt_debug_info(self, tmp_path: Path) -> None:
        info = bytearray(build_debug_info())
        # Abbreviation code of the first entry points at nothing
        info[11] = 0x7F
        path = tmp_path / "corrupt.out"
        path.write_bytes(
            build_coff([(".debug_abbrev", build_debug_abbrev()), (".debug_info", bytes(info))])
        )

        with pytest.raises(MalformedDebugInfo, match="undeclared abbreviation"):
            with MapfileGenerator(path) as generator:
                generator.generate()

    def test_mapper_bug_is_not_reported_as_bad_debug_info(self, coff_path: Path) -> None:
        with patch(
            "coff_dwarf_mapper.application.generators.mapfile_generator.Mapper.process",
            side_effect=KeyError("missing handler"),
        ):
            with pytest.raises(KeyError, match="missing handler"):
                with MapfileGenerator(coff_path) as generator:
                    generator.generate()

    def test_truncated_debug_info(self, tmp_path: Path) -> None:
        info = build_debug_info()[:-25]
        path = tmp_path / "truncated.out"
        path.write_bytes(
            build_coff([(".debug_abbrev", build_debug_abbrev()), (".debug_info", info)])
        )

        with pytest.raises(MalformedDebugInfo):
            with MapfileGenerator(path) as generator:
                generator.generate()

    def test_strict_mode_fails_on_skipped_entries(self, tmp_path: Path) -> None:
        info = bytearray(build_debug_info())
        # Turn origin's DW_OP_addr into DW_OP_reg3 followed by padding
        needle = bytes([5, 0x03]) + struct.pack("<I", 0x1000)
        at = info.index(needle)
        info[at + 1 : at + 6] = bytes([0x53, 0x96, 0x96, 0x96, 0x96])
        path = tmp_path / "regvar.out"
        path.write_bytes(
            build_coff([(".debug_abbrev", build_debug_abbrev()), (".debug_info", bytes(info))])
        )

        with MapfileGenerator(path) as generator:
            assert [e.name for e in generator.generate()] == ["counter"]

        with pytest.raises(UnsupportedAttributeShape, match="strict"):
            with MapfileGenerator(path, strict=True) as generator:
                generator.generate()
