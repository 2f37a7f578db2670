#!/usr/bin/env python3

"""Debug-info walking and type graph construction."""

from .entry_tree import DebugEntry, DebugInfoSource, DebugUnit, LocationValue
from .location_evaluator import Location, LocationEvaluator, LocationKind
from .mapper import Mapper, SkipStats

__all__ = [
    "DebugEntry",
    "DebugInfoSource",
    "DebugUnit",
    "Location",
    "LocationEvaluator",
    "LocationKind",
    "LocationValue",
    "Mapper",
    "SkipStats",
]
