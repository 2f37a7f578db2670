#!/usr/bin/env python3

"""Container parsing services for COFF object files."""

from .byte_reader import read_u16, read_u32, slice_range
from .coff_parser import CoffFile, parse_file_header, parse_section_header
from .string_table import check_table_length, resolve_name

__all__ = [
    "CoffFile",
    "check_table_length",
    "parse_file_header",
    "parse_section_header",
    "read_u16",
    "read_u32",
    "resolve_name",
    "slice_range",
]
