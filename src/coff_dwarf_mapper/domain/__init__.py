#!/usr/bin/env python3

"""Domain layer containing the container parser, the type graph and its models."""

from . import errors, models, services

__all__ = [
    "errors",
    "models",
    "services",
]
