#!/usr/bin/env python3

"""Type graph models."""

from .member_info import StructMember
from .struct_info import Structure
from .type_collection import TypeCollection
from .typedef_info import Typedef
from .variable_info import Variable

__all__ = [
    "StructMember",
    "Structure",
    "TypeCollection",
    "Typedef",
    "Variable",
]
