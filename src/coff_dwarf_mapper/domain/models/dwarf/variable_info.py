#!/usr/bin/env python3

"""Global variable model."""

from dataclasses import dataclass, field

from .member_info import StructMember


@dataclass
class Variable:
    """A file-scope variable with its resolved address."""

    name: str
    address: int
    type_offset: int
    fields: list[StructMember] = field(default_factory=list)
