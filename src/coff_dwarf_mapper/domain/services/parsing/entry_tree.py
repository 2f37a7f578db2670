#!/usr/bin/env python3

"""Abstract view of a debug-info entry tree.

The type graph builder only talks to these interfaces. The production
implementation wraps pyelftools (see infrastructure.dwarf); tests supply
in-memory trees.

Attribute accessors return None when the attribute is absent and raise
UnsupportedAttributeShape when it is present in a form they cannot use.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from .location_evaluator import LocationEvaluator

# A location attribute is either a constant or an encoded expression
LocationValue = int | list[int]


class DebugEntry(ABC):
    """One node of the entry tree."""

    @property
    @abstractmethod
    def tag(self) -> str:
        """DWARF tag name, e.g. ``DW_TAG_variable``."""

    @property
    @abstractmethod
    def offset(self) -> int:
        """Section offset of this entry; the identity other entries refer to."""

    @abstractmethod
    def has_attribute(self, attribute: str) -> bool: ...

    @abstractmethod
    def name(self) -> str | None:
        """DW_AT_name as text."""

    @abstractmethod
    def type_offset(self) -> int | None:
        """DW_AT_type as a section offset."""

    @abstractmethod
    def location(self, attribute: str) -> LocationValue | None:
        """A location-class attribute: a constant or an expression's bytes."""

    @abstractmethod
    def referenced_entry(self, attribute: str) -> "DebugEntry | None":
        """The entry a reference attribute points at."""

    @abstractmethod
    def children(self) -> Iterator["DebugEntry"]: ...


class DebugUnit(ABC):
    """A compilation unit: an entry tree plus its expression encoding."""

    @property
    @abstractmethod
    def offset(self) -> int: ...

    @property
    @abstractmethod
    def length(self) -> int: ...

    @property
    @abstractmethod
    def evaluator(self) -> LocationEvaluator: ...

    @abstractmethod
    def top_entry(self) -> DebugEntry: ...


class DebugInfoSource(ABC):
    """Enumerates the compilation units of one object file."""

    @abstractmethod
    def iter_units(self) -> Iterator[DebugUnit]: ...
