#!/usr/bin/env python3

"""COFF container parser.

Decodes the file header, the section header table, the symbol and string
tables, and borrows each section's payload from the file buffer. Every
bounds check happens before any section is materialized; a violation raises
MalformedContainer and nothing is returned.
"""

from ....infrastructure.logging import get_logger, log_timing
from ...errors import MalformedContainer, UnresolvedName
from ...models.coff import FileHeader, Section, SectionHeader
from .byte_reader import read_u16, read_u32, slice_range
from .string_table import NAME_FIELD_SIZE, check_table_length, resolve_name

logger = get_logger(__name__)


def parse_file_header(data: bytes | memoryview) -> FileHeader:
    """Decode the fixed-size file header."""
    if len(data) < FileHeader.SIZE:
        raise MalformedContainer(
            f"File is {len(data)} bytes, shorter than the {FileHeader.SIZE} byte header"
        )

    return FileHeader(
        version_id=read_u16(data, 0),
        section_count=read_u16(data, 2),
        timestamp=read_u32(data, 4),
        symbol_table_offset=read_u32(data, 8),
        symbol_count=read_u32(data, 12),
        optional_header_size=read_u16(data, 16),
        flags=read_u16(data, 18),
        target_id=read_u16(data, 20),
    )


def parse_section_header(record: bytes | memoryview, string_table: bytes | memoryview) -> SectionHeader:
    """Decode one section header record.

    A name that cannot be resolved is logged and left as None.
    """
    try:
        name: str | None = resolve_name(record[:NAME_FIELD_SIZE], string_table)
    except UnresolvedName as e:
        logger.warning(f"Unnamed section header: {e}")
        name = None

    return SectionHeader(
        name=name,
        physical_address=read_u32(record, 8),
        virtual_address=read_u32(record, 12),
        size=read_u32(record, 16),
        data_offset=read_u32(record, 20),
        relocation_offset=read_u32(record, 24),
        relocation_count=read_u32(record, 32),
        line_count=read_u32(record, 36),
        flags=read_u32(record, 40),
        memory_page=read_u16(record, 46),
    )


class CoffFile:
    """A parsed COFF object file.

    Sections borrow from the buffer passed to parse(); the buffer must stay
    alive and unchanged for as long as the sections are used.
    """

    def __init__(
        self,
        data: bytes,
        header: FileHeader,
        section_headers: list[SectionHeader],
        sections: list[Section],
        symbol_table: memoryview,
        string_table: memoryview,
    ):
        self.data = data
        self.header = header
        self.section_headers = section_headers
        self.sections = sections
        self.symbol_table = symbol_table
        self.string_table = string_table

    @classmethod
    @log_timing
    def parse(cls, data: bytes) -> "CoffFile":
        """Parse a whole container held in memory.

        Raises:
            MalformedContainer: when any table or payload lies outside the buffer
        """
        header = parse_file_header(data)

        table_start = header.section_table_offset
        table_length = header.section_count * SectionHeader.SIZE
        header_table = slice_range(data, table_start, table_length, "Section header table")

        if header.symbol_table_offset == 0:
            # Stripped image: no symbol table and so no string table
            symbol_table = memoryview(b"")
            string_table = memoryview(b"")
        else:
            symbol_table = slice_range(
                data, header.symbol_table_offset, header.symbol_table_size, "Symbol table"
            )
            string_table_start = header.symbol_table_offset + header.symbol_table_size
            string_table = slice_range(
                data, string_table_start, len(data) - string_table_start, "String table"
            )
            check_table_length(string_table)

        section_headers = [
            parse_section_header(
                header_table[index * SectionHeader.SIZE : (index + 1) * SectionHeader.SIZE],
                string_table,
            )
            for index in range(header.section_count)
        ]

        # Validate every payload before borrowing any of them
        for section_header in section_headers:
            if section_header.has_data and section_header.end_offset > len(data):
                raise MalformedContainer(
                    f"Section {section_header.name!r} [{section_header.data_offset}, "
                    f"{section_header.end_offset}) lies outside the {len(data)} byte file"
                )

        sections = [
            Section(
                name=section_header.name,
                start=section_header.data_offset,
                view=slice_range(
                    data, section_header.data_offset, section_header.size, "Section"
                ),
            )
            for section_header in section_headers
            if section_header.has_data
        ]

        logger.debug(
            f"Parsed COFF for {header.machine_name} (target 0x{header.target_id:04x}): "
            f"{header.section_count} section headers, {len(sections)} with data, "
            f"{header.symbol_count} symbols"
        )
        return cls(data, header, section_headers, sections, symbol_table, string_table)

    def number_of_sections(self) -> int:
        """Section count declared in the file header."""
        return self.header.section_count

    def get_section(self, name: str) -> Section | None:
        """Return the first materialized section called ``name``, or None."""
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def section_data(self, name: str) -> bytes:
        """Contents of the named section, or empty bytes when it is absent."""
        section = self.get_section(name)
        if section is None:
            return b""
        return section.data
