#!/usr/bin/env python3

"""Map file output models."""

from .map_entry import MapEntry

__all__ = ["MapEntry"]
