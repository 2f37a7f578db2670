"""COFF DWARF Mapper - global variable map files from TI COFF debug info."""

from .application.generators import MapfileGenerator
from .infrastructure.config import Config
from .main import main

__all__ = ["Config", "MapfileGenerator", "main"]
