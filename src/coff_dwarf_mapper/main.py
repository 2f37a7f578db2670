"""Main entry point for the COFF DWARF mapper."""

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from .application.generators import MapfileGenerator
from .domain.errors import MapperError
from .infrastructure.config import OUTPUT_SUFFIX, Config
from .infrastructure.logging import LoggerSetup, get_logger


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="coff-dwarf-mapper",
        description="Map the global variables of a TI COFF object file to their "
        "addresses and structure layouts, read from its DWARF debug info",
        epilog=f"""
Examples:
  # Write firmware.out{OUTPUT_SUFFIX} (compact JSON)
  coff-dwarf-mapper firmware.out

  # Indented output to a chosen path
  coff-dwarf-mapper firmware.out -o firmware.json --pretty

  # Fail if any debug entry had to be skipped, with a debug log under logs/
  coff-dwarf-mapper firmware.out --strict --verbose --log-dir logs

  # Using .env file for configuration
  echo 'MAPPER_INPUT_PATH=firmware.out' > .env
  coff-dwarf-mapper
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "input_file",
        type=Path,
        nargs="?",
        help="Path to the COFF object file (optional if using .env)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help=f"Map file to write (default: input path + '{OUTPUT_SUFFIX}')",
    )
    parser.add_argument(
        "-p",
        "--pretty",
        action="store_true",
        help="Indent the JSON output",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output with debug logs",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of omitting debug entries that cannot be mapped",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        metavar="DIR",
        help="Also write a timestamped debug log file to DIR",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> NoReturn:
    """Run the mapper on one object file and write its map file."""
    args = parse_args(argv)

    try:
        config = Config.from_args(
            input_path=args.input_file,
            output_path=args.output,
            pretty=args.pretty,
            verbose=args.verbose,
            strict=args.strict,
            log_dir=args.log_dir,
        )
        config.validate()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    LoggerSetup.initialize(config.log_dir, verbose=config.verbose)
    logger = get_logger(__name__)

    assert config.input_path is not None and config.output_path is not None
    logger.debug(f"Input file: {config.input_path}")
    logger.debug(f"Output file: {config.output_path}")

    try:
        with MapfileGenerator(config.input_path, strict=config.strict) as generator:
            entries = generator.write(config.output_path, pretty=config.pretty)
    except (MapperError, OSError) as e:
        logger.error(f"Mapping failed: {e}")
        if config.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    logger.info(f"[SUCCESS] Mapped {len(entries)} globals to {config.output_path}")
    sys.exit(0)


if __name__ == "__main__":
    main()
