"""Infrastructure configuration module."""

from .application_config import OUTPUT_SUFFIX, Config, default_output_path

__all__ = ["Config", "OUTPUT_SUFFIX", "default_output_path"]
