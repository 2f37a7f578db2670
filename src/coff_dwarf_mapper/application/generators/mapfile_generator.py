#!/usr/bin/env python3

"""COFF-to-map-file generator orchestrator (Application Layer).

Runs the pipeline over one object file held in memory:
- CoffFile: container parsing
- load_debug_info: pyelftools DWARF decoding over the container's sections
- Mapper: type graph collection
- Postprocessor: typedef aliasing and member flattening
- MapEntryProjector: projection onto map entries
"""

from pathlib import Path

from elftools.common.exceptions import DWARFError, ELFError
from elftools.construct.core import ConstructError

from ...domain.errors import MalformedDebugInfo, OutputIOFailure, UnsupportedAttributeShape
from ...domain.models.dwarf import TypeCollection
from ...domain.models.mapfile import MapEntry
from ...domain.services.container import CoffFile
from ...domain.services.generation import MapEntryProjector, write_map_file
from ...domain.services.parsing import DebugInfoSource, Mapper
from ...domain.services.resolution import Postprocessor
from ...infrastructure.dwarf import load_debug_info
from ...infrastructure.logging import ProgressTracker, get_logger, log_timing

logger = get_logger(__name__)

# Raised by pyelftools for debug info it cannot decode. Unknown abbreviation
# codes are translated by the debug-info adapter itself.
DECODER_ERRORS = (DWARFError, ELFError, ConstructError)


class MapfileGenerator:
    """Produces map entries for the globals of a COFF object file.

    Used as a context manager: entering reads and parses the file, leaving
    releases the buffer the parsed sections borrow from.
    """

    def __init__(self, input_path: Path, strict: bool = False):
        """Initialize generator with the object file path.

        Args:
            input_path: Path to the COFF file
            strict: Fail when any debug entry had to be omitted
        """
        self.input_path = input_path
        self.strict = strict
        self.data: bytes | None = None
        self.container: CoffFile | None = None
        self.debug_info: DebugInfoSource | None = None
        self.types: TypeCollection | None = None
        self.tracker = ProgressTracker(logger)

    def __enter__(self) -> "MapfileGenerator":
        """Read and parse the container, and open its debug info.

        Raises:
            OutputIOFailure: if the input cannot be read
            MalformedContainer: if the COFF layout is inconsistent
            MalformedDebugInfo: if pyelftools rejects the DWARF sections
        """
        logger.debug(f"Reading object file: {self.input_path}")
        try:
            self.data = self.input_path.read_bytes()
        except OSError as e:
            raise OutputIOFailure(f"Cannot read {self.input_path}: {e}") from e

        with self.tracker.track_operation("parse container"):
            self.container = CoffFile.parse(self.data)

        try:
            self.debug_info = load_debug_info(self.container)
        except DECODER_ERRORS as e:
            raise MalformedDebugInfo(f"Cannot open debug info of {self.input_path}: {e}") from e

        logger.info(
            f"Loaded {self.input_path} ({len(self.data)} bytes, "
            f"{len(self.container.sections)} sections, {self.container.header.machine_name})"
        )
        return self

    def __exit__(
        self, exc_type: type | None, exc_val: Exception | None, exc_tb: object | None
    ) -> None:
        """Drop the parsed container and the buffer it borrows from."""
        self.debug_info = None
        self.container = None
        self.data = None
        logger.debug("Object file released")

    @log_timing
    def collect_types(self) -> TypeCollection:
        """Walk the debug info and resolve the type graph.

        Raises:
            MalformedDebugInfo: if pyelftools fails partway through the walk
            UnsupportedAttributeShape: in strict mode, when entries were omitted
        """
        assert self.debug_info is not None, "generator must be entered first"

        mapper = Mapper(self.tracker)
        with self.tracker.track_operation("walk debug info"):
            try:
                collected = mapper.process(self.debug_info)
            except DECODER_ERRORS as e:
                raise MalformedDebugInfo(f"Cannot decode debug info of {self.input_path}: {e}") from e

        if self.strict and mapper.skips.total:
            raise UnsupportedAttributeShape(
                f"{mapper.skips.total} debug entries were omitted (strict mode)"
            )

        with self.tracker.track_operation("resolve types"):
            self.types = Postprocessor(collected).run()
        return self.types

    def generate(self) -> list[MapEntry]:
        """Map entries for every global of the file, in debug-info order."""
        types = self.collect_types()
        with self.tracker.track_operation("project map entries"):
            return MapEntryProjector(types).project()

    def write(self, output_path: Path, pretty: bool = False) -> list[MapEntry]:
        """Generate the map and write it to ``output_path``.

        Nothing is written when generation fails.
        """
        entries = self.generate()
        write_map_file(entries, output_path, pretty=pretty)
        return entries
