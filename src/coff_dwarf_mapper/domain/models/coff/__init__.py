#!/usr/bin/env python3

"""COFF container models."""

from .file_header import TARGET_NAMES, FileHeader
from .section import Section, SectionHeader

__all__ = [
    "FileHeader",
    "Section",
    "SectionHeader",
    "TARGET_NAMES",
]
