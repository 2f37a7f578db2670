#!/usr/bin/env python3

"""Section header and section payload models."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class SectionHeader:
    """One 48-byte record of the section header table.

    ``name`` is the resolved text, or None when the name field could not be
    decoded.
    """

    name: str | None
    physical_address: int
    virtual_address: int
    size: int
    data_offset: int
    relocation_offset: int
    relocation_count: int
    line_count: int
    flags: int
    memory_page: int

    SIZE: ClassVar[int] = 48

    @property
    def has_data(self) -> bool:
        """A zero offset or zero size marks a section without file contents."""
        return self.data_offset != 0 and self.size != 0

    @property
    def end_offset(self) -> int:
        return self.data_offset + self.size


@dataclass(frozen=True)
class Section:
    """A named byte range borrowed from the container buffer."""

    name: str | None
    start: int
    view: memoryview

    @property
    def length(self) -> int:
        return len(self.view)

    @property
    def data(self) -> bytes:
        """Owned copy of the section contents."""
        return self.view.tobytes()
