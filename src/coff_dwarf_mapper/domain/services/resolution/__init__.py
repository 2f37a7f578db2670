#!/usr/bin/env python3

"""Type graph resolution services."""

from .postprocessor import Postprocessor
from .struct_flattener import StructFlattener

__all__ = ["Postprocessor", "StructFlattener"]
