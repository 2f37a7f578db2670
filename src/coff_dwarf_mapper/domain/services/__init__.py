#!/usr/bin/env python3

"""Domain services layer."""

from . import container, generation, parsing, resolution

__all__ = [
    "container",
    "generation",
    "parsing",
    "resolution",
]
