#!/usr/bin/env python3

"""Map file generators."""

from .mapfile_generator import MapfileGenerator

__all__ = ["MapfileGenerator"]
