#!/usr/bin/env python3

"""Application layer orchestrating the mapping pipeline."""
