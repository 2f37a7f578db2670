#!/usr/bin/env python3

"""Map file generation services."""

from .map_projector import MapEntryProjector
from .mapfile_writer import dumps, loads, write_map_file

__all__ = ["MapEntryProjector", "dumps", "loads", "write_map_file"]
