#!/usr/bin/env python3

"""Domain models for the COFF/DWARF mapper."""

from . import coff, dwarf, mapfile

__all__ = [
    "coff",
    "dwarf",
    "mapfile",
]
