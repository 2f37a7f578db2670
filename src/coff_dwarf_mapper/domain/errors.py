#!/usr/bin/env python3

"""Error taxonomy for container parsing and type-graph resolution.

Container-level errors are fatal. Debug-info level errors are raised close to
the offending entry and recovered by the caller, which omits that entry.
"""


class MapperError(Exception):
    """Base class for all errors raised by the mapper."""


class MalformedContainer(MapperError):
    """Header arithmetic or table bounds exceed the file buffer."""


class UnresolvedName(MapperError):
    """A section name field cannot be decoded to text."""


class UnsupportedAttributeShape(MapperError):
    """A debug-info entry lacks an attribute or carries one of an unhandled kind."""


class ResolutionCycle(MapperError):
    """A structure was reached again while it is still being expanded."""

    def __init__(self, offset: int, path: list[int]):
        self.offset = offset
        self.path = path
        chain = " -> ".join(f"0x{o:x}" for o in [*path, offset])
        super().__init__(f"Structure 0x{offset:x} references itself: {chain}")


class OutputIOFailure(MapperError):
    """Input cannot be read or output cannot be written."""


class MalformedDebugInfo(MapperError):
    """The debug-info decoder could not read the entry tree."""
