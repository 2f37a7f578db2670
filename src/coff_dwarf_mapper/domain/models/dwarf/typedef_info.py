#!/usr/bin/env python3

"""Typedef model for the type graph."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Typedef:
    """An alias: ``name`` refers to the type entry at ``type_offset``."""

    name: str
    type_offset: int
