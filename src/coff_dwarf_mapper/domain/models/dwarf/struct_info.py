#!/usr/bin/env python3

"""Structure model for the type graph."""

from dataclasses import dataclass, field

from .member_info import StructMember


@dataclass
class Structure:
    """A structure (or union) definition keyed by its debug-info offset."""

    name: str | None
    type_offset: int
    members: list[StructMember] = field(default_factory=list)
