#!/usr/bin/env python3

"""COFF file header model."""

from dataclasses import dataclass
from typing import ClassVar

# Target ids written by TI code generation tools
TARGET_NAMES = {
    0x0097: "TMS470",
    0x0098: "C5400",
    0x0099: "C6000",
    0x009C: "C5500",
    0x009D: "C2800",
    0x00A0: "MSP430",
    0x00A1: "C5500+",
}


@dataclass(frozen=True)
class FileHeader:
    """Fixed 22-byte header at the start of the container."""

    version_id: int
    section_count: int
    timestamp: int
    symbol_table_offset: int
    symbol_count: int
    optional_header_size: int
    flags: int
    target_id: int

    SIZE: ClassVar[int] = 22
    SYMBOL_ENTRY_SIZE: ClassVar[int] = 18

    @property
    def symbol_table_size(self) -> int:
        """Byte length of the symbol table."""
        return self.symbol_count * self.SYMBOL_ENTRY_SIZE

    @property
    def section_table_offset(self) -> int:
        """Section headers start right after the optional header."""
        return self.SIZE + self.optional_header_size

    @property
    def machine_name(self) -> str:
        return TARGET_NAMES.get(self.target_id, "unknown")
