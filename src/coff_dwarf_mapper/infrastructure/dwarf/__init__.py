#!/usr/bin/env python3

"""Debug-info decoding backed by pyelftools."""

from .elftools_source import ElftoolsDebugInfo, ElftoolsEntry, ElftoolsUnit, load_debug_info

__all__ = ["ElftoolsDebugInfo", "ElftoolsEntry", "ElftoolsUnit", "load_debug_info"]
