#!/usr/bin/env python3

"""Type graph builder.

Walks every unit's entry tree once and records base types, typedefs,
structures (with their members) and file-scope variables, all keyed by
debug-info offset. Entries missing what they need are omitted one at a
time; the walk itself never stops for them.
"""

from collections import Counter
from collections.abc import Callable

from ....infrastructure.logging import ProgressTracker, get_logger, log_timing
from ...errors import UnsupportedAttributeShape
from ...models.dwarf import Structure, StructMember, TypeCollection, Typedef, Variable
from ...models.dwarf.tag_constants import (
    DW_AT_DATA_MEMBER_LOCATION,
    DW_AT_DECLARATION,
    DW_AT_LOCATION,
    DW_AT_SPECIFICATION,
    DW_TAG_BASE_TYPE,
    DW_TAG_MEMBER,
    DW_TAG_TYPEDEF,
    DW_TAG_VARIABLE,
    MAX_GLOBAL_DEPTH,
    STRUCTURE_TAGS,
    TRANSPARENT_QUALIFIER_TAGS,
)
from .entry_tree import DebugEntry, DebugInfoSource, DebugUnit
from .location_evaluator import LocationKind

logger = get_logger(__name__)


class SkipStats:
    """Counts entries omitted during the walk, per entry kind."""

    def __init__(self) -> None:
        self.counts: Counter[str] = Counter()

    def record(self, kind: str, entry: DebugEntry, reason: str) -> None:
        self.counts[kind] += 1
        logger.debug(f"Skipped {kind} at 0x{entry.offset:x}: {reason}")

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def report(self) -> None:
        if not self.total:
            return
        details = ", ".join(f"{count} {kind}" for kind, count in sorted(self.counts.items()))
        logger.warning(f"Omitted {self.total} debug entries ({details})")


class Mapper:
    """Builds a TypeCollection from a debug-info entry tree."""

    def __init__(self, tracker: ProgressTracker | None = None):
        self.types = TypeCollection()
        self.skips = SkipStats()
        self.tracker = tracker or ProgressTracker(logger)
        self._handlers: dict[str, Callable[[DebugEntry, int, DebugUnit], None]] = {
            DW_TAG_TYPEDEF: self.process_typedef,
            DW_TAG_VARIABLE: self.process_variable,
            DW_TAG_BASE_TYPE: self.process_base_type,
        }
        for tag in STRUCTURE_TAGS:
            self._handlers[tag] = self.process_struct
        for tag in TRANSPARENT_QUALIFIER_TAGS:
            self._handlers[tag] = self.process_qualifier

    @log_timing
    def process(self, source: DebugInfoSource) -> TypeCollection:
        """Walk every unit of ``source`` and return the collected types."""
        for unit in source.iter_units():
            with self.tracker.track_unit(unit):
                self.process_tree(unit.top_entry(), 0, unit)

        self.tracker.report_summary()
        self.skips.report()
        logger.info(
            f"Collected {len(self.types.structs)} structures, {len(self.types.typedefs)} typedefs, "
            f"{len(self.types.base_types)} base types, {len(self.types.globals)} globals"
        )
        return self.types

    def process_tree(self, entry: DebugEntry, level: int, unit: DebugUnit) -> None:
        """Classify ``entry`` by tag, or descend into its children."""
        self.tracker.count_entry()

        handler = self._handlers.get(entry.tag)
        if handler is not None:
            handler(entry, level, unit)
            return

        for child in entry.children():
            self.process_tree(child, level + 1, unit)

    def process_base_type(self, entry: DebugEntry, level: int, unit: DebugUnit) -> None:
        try:
            name = entry.name()
        except UnsupportedAttributeShape as e:
            self.skips.record("base type", entry, str(e))
            return

        if name is None:
            self.skips.record("base type", entry, "no name")
            return

        self.types.base_types[entry.offset] = name

    def process_typedef(self, entry: DebugEntry, level: int, unit: DebugUnit) -> None:
        try:
            name = entry.name()
            type_offset = entry.type_offset()
        except UnsupportedAttributeShape as e:
            self.skips.record("typedef", entry, str(e))
            return

        if name is None or type_offset is None:
            self.skips.record("typedef", entry, "needs both a name and a type")
            return

        self.types.typedefs[entry.offset] = Typedef(name=name, type_offset=type_offset)

    def process_qualifier(self, entry: DebugEntry, level: int, unit: DebugUnit) -> None:
        try:
            type_offset = entry.type_offset()
        except UnsupportedAttributeShape as e:
            self.skips.record("qualifier", entry, str(e))
            return

        # const void and friends have no target
        if type_offset is not None:
            self.types.qualifiers[entry.offset] = type_offset

    def process_struct(self, entry: DebugEntry, level: int, unit: DebugUnit) -> None:
        try:
            name = entry.name()
        except UnsupportedAttributeShape:
            name = None

        members = []
        for child in entry.children():
            self.tracker.count_entry()
            if child.tag != DW_TAG_MEMBER:
                continue
            member = self.process_struct_member(child, unit)
            if member is not None:
                members.append(member)

        self.types.structs[entry.offset] = Structure(
            name=name, type_offset=entry.offset, members=members
        )

    def process_struct_member(self, entry: DebugEntry, unit: DebugUnit) -> StructMember | None:
        """Build a member, or return None when any required piece is missing."""
        try:
            name = entry.name()
            type_offset = entry.type_offset()
            location = entry.location(DW_AT_DATA_MEMBER_LOCATION)
        except UnsupportedAttributeShape as e:
            self.skips.record("member", entry, str(e))
            return None

        if name is None or type_offset is None or location is None:
            self.skips.record("member", entry, "needs a name, a type and a member location")
            return None

        if isinstance(location, int):
            member_offset = location
        else:
            try:
                result = unit.evaluator.evaluate(location, initial_value=0)
            except UnsupportedAttributeShape as e:
                self.skips.record("member", entry, str(e))
                return None

            if result.kind is not LocationKind.ADDRESS:
                self.skips.record("member", entry, f"location is a {result.kind.value}")
                return None
            member_offset = result.value

        return StructMember(name=name, type_offset=type_offset, member_offset=member_offset)

    def process_variable(self, entry: DebugEntry, level: int, unit: DebugUnit) -> None:
        if level > MAX_GLOBAL_DEPTH:
            return

        try:
            location = entry.location(DW_AT_LOCATION)
            if location is None and entry.has_attribute(DW_AT_DECLARATION):
                # Extern declaration; the definition carries the location
                return
            name, type_offset = self._variable_identity(entry)
        except UnsupportedAttributeShape as e:
            self.skips.record("variable", entry, str(e))
            return

        if name is None or type_offset is None or location is None:
            self.skips.record("variable", entry, "needs a name, a type and a location")
            return

        if isinstance(location, int):
            self.skips.record("variable", entry, "location list instead of an expression")
            return

        try:
            result = unit.evaluator.evaluate(location)
        except UnsupportedAttributeShape as e:
            self.skips.record("variable", entry, str(e))
            return

        if result.kind is not LocationKind.RELOCATED_ADDRESS:
            self.skips.record("variable", entry, f"location is a {result.kind.value}")
            return

        self.types.globals.append(
            Variable(name=name, address=result.value, type_offset=type_offset)
        )

    def _variable_identity(self, entry: DebugEntry) -> tuple[str | None, int | None]:
        """Name and type of a variable, completed from its declaration if needed."""
        name = entry.name()
        type_offset = entry.type_offset()

        if (name is None or type_offset is None) and entry.has_attribute(DW_AT_SPECIFICATION):
            declaration = entry.referenced_entry(DW_AT_SPECIFICATION)
            if declaration is not None:
                if name is None:
                    name = declaration.name()
                if type_offset is None:
                    type_offset = declaration.type_offset()

        return name, type_offset
