#!/usr/bin/env python3

"""Offset-keyed collections produced by the debug-info walk."""

from dataclasses import dataclass, field

from .struct_info import Structure
from .typedef_info import Typedef
from .variable_info import Variable


@dataclass
class TypeCollection:
    """Everything the type graph builder records.

    Types are keyed by debug-info offset, never by name. ``qualifiers`` maps
    const/volatile entries to the offset they qualify. ``globals`` keeps tree
    visitation order.
    """

    base_types: dict[int, str] = field(default_factory=dict)
    typedefs: dict[int, Typedef] = field(default_factory=dict)
    structs: dict[int, Structure] = field(default_factory=dict)
    qualifiers: dict[int, int] = field(default_factory=dict)
    globals: list[Variable] = field(default_factory=list)

    def resolve_struct(self, offset: int) -> Structure | None:
        return self.structs.get(offset)

    def type_name(self, offset: int) -> str | None:
        """Display name of the type at ``offset``, if it is a known struct or base type."""
        struct = self.structs.get(offset)
        if struct is not None:
            return struct.name
        return self.base_types.get(offset)
