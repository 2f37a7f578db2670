"""Configuration management for the map file generator."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

OUTPUT_SUFFIX = ".map.json"

_TRUE_VALUES = ("true", "1", "yes", "on")


def default_output_path(input_path: Path) -> Path:
    """Output path used when none is given: the input path plus OUTPUT_SUFFIX."""
    return input_path.with_name(input_path.name + OUTPUT_SUFFIX)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() in _TRUE_VALUES


@dataclass
class Config:
    """Configuration for a single mapping run."""

    input_path: Optional[Path] = None
    output_path: Optional[Path] = None
    pretty: bool = False
    verbose: bool = False
    strict: bool = False
    log_dir: Optional[Path] = field(default=None)

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "Config":
        """
        Load configuration from environment variables or .env file.

        Args:
            env_path: Optional path to .env file (defaults to .env in current directory)

        Returns:
            Config object
        """
        if env_path is None:
            env_path = Path.cwd() / ".env"

        if env_path.exists():
            load_dotenv(env_path)

        input_str = os.getenv("MAPPER_INPUT_PATH")
        output_str = os.getenv("MAPPER_OUTPUT_PATH")
        log_dir_str = os.getenv("MAPPER_LOG_DIR")

        return cls(
            input_path=Path(input_str) if input_str else None,
            output_path=Path(output_str) if output_str else None,
            pretty=_env_flag("MAPPER_PRETTY"),
            verbose=_env_flag("MAPPER_VERBOSE"),
            strict=_env_flag("MAPPER_STRICT"),
            log_dir=Path(log_dir_str) if log_dir_str else None,
        )

    @classmethod
    def from_args(
        cls,
        input_path: Optional[Path] = None,
        output_path: Optional[Path] = None,
        pretty: Optional[bool] = None,
        verbose: Optional[bool] = None,
        strict: Optional[bool] = None,
        log_dir: Optional[Path] = None,
    ) -> "Config":
        """
        Create configuration from explicit arguments, falling back to environment.

        Flags only override the environment when they are set, so an unset
        command-line switch never clears MAPPER_PRETTY and friends.

        Returns:
            Config object
        """
        config = cls.from_env()

        if input_path is not None:
            config.input_path = input_path
        if output_path is not None:
            config.output_path = output_path
        if pretty:
            config.pretty = True
        if verbose:
            config.verbose = True
        if strict:
            config.strict = True
        if log_dir is not None:
            config.log_dir = log_dir

        if config.output_path is None and config.input_path is not None:
            config.output_path = default_output_path(config.input_path)

        return config

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ValueError: If configuration is invalid
        """
        if self.input_path is None:
            raise ValueError("No input file given")

        if not self.input_path.exists():
            raise ValueError(f"Input file not found: {self.input_path}")

        if not self.input_path.is_file():
            raise ValueError(f"Not a file: {self.input_path}")

        if self.output_path is not None and self.output_path.is_dir():
            raise ValueError(f"Output path is a directory: {self.output_path}")
