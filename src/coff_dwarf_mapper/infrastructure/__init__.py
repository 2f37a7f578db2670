#!/usr/bin/env python3

"""Infrastructure layer for technical concerns.

The pyelftools adapter lives in ``infrastructure.dwarf`` and is imported
explicitly, since it depends on the domain layer.
"""

from . import config, logging

__all__ = [
    "config",
    "logging",
]
