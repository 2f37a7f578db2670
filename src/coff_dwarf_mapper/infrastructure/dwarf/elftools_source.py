#!/usr/bin/env python3

"""pyelftools-backed debug-info source.

Builds a DWARFInfo straight from the sections of a parsed COFF container; no
ELF wrapper is involved. Every ``*_sec`` keyword DWARFInfo takes is filled
from the container section of the same name, or left as None when the file
has no such section. ``.debug_info`` and ``.debug_abbrev`` are always given,
empty when absent, so a file without debug info yields zero units.
"""

from collections.abc import Iterator
from io import BytesIO
from elftools.common.exceptions import DWARFError
from elftools.dwarf.compileunit import CompileUnit
from elftools.dwarf.die import DIE, AttributeValue
from elftools.dwarf.dwarfinfo import DebugSectionDescriptor, DWARFInfo, DwarfConfig

from ...domain.errors import MalformedDebugInfo, UnsupportedAttributeShape
from ...domain.models.dwarf.tag_constants import DW_AT_NAME, DW_AT_TYPE
from ...domain.services.container import CoffFile
from ...domain.services.parsing import (
    DebugEntry,
    DebugInfoSource,
    DebugUnit,
    LocationEvaluator,
    LocationValue,
)
from ..logging import get_logger, log_timing

logger = get_logger(__name__)

REQUIRED_SECTIONS = (".debug_info", ".debug_abbrev")

UNIT_REFERENCE_FORMS = frozenset(
    {"DW_FORM_ref1", "DW_FORM_ref2", "DW_FORM_ref4", "DW_FORM_ref8", "DW_FORM_ref_udata"}
)
SECTION_REFERENCE_FORMS = frozenset({"DW_FORM_ref_addr"})
EXPRESSION_FORMS = frozenset(
    {"DW_FORM_exprloc", "DW_FORM_block", "DW_FORM_block1", "DW_FORM_block2", "DW_FORM_block4"}
)
CONSTANT_FORMS = frozenset(
    {
        "DW_FORM_data1",
        "DW_FORM_data2",
        "DW_FORM_data4",
        "DW_FORM_data8",
        "DW_FORM_udata",
        "DW_FORM_sdata",
        "DW_FORM_sec_offset",
        "DW_FORM_implicit_const",
    }
)

# DWARFInfo section keywords besides the two required ones
OPTIONAL_SECTION_ARGUMENTS = (
    "debug_aranges_sec",
    "debug_frame_sec",
    "eh_frame_sec",
    "debug_str_sec",
    "debug_loc_sec",
    "debug_ranges_sec",
    "debug_line_sec",
    "debug_pubtypes_sec",
    "debug_pubnames_sec",
    "debug_addr_sec",
    "debug_str_offsets_sec",
    "debug_line_str_sec",
    "debug_loclists_sec",
    "debug_rnglists_sec",
    "debug_sup_sec",
    "gnu_debugaltlink_sec",
    "debug_types_sec",
)


def _unknown_code(offset: int, error: KeyError) -> MalformedDebugInfo:
    return MalformedDebugInfo(f"Entry near 0x{offset:x} uses an undeclared abbreviation: {error}")


def _decoded_children(die: DIE) -> Iterator[DIE]:
    """Children of ``die``, turning unknown abbreviation codes into MalformedDebugInfo."""
    children = die.iter_children()
    while True:
        try:
            child = next(children)
        except StopIteration:
            return
        except KeyError as e:
            raise _unknown_code(die.offset, e) from e
        yield child


class ElftoolsEntry(DebugEntry):
    """DebugEntry over a pyelftools DIE."""

    def __init__(self, die: DIE):
        self._die = die

    @property
    def tag(self) -> str:
        return str(self._die.tag)

    @property
    def offset(self) -> int:
        return int(self._die.offset)

    def has_attribute(self, attribute: str) -> bool:
        return attribute in self._die.attributes

    def _attribute(self, attribute: str) -> AttributeValue | None:
        return self._die.attributes.get(attribute)

    def name(self) -> str | None:
        attr = self._attribute(DW_AT_NAME)
        if attr is None:
            return None

        value = attr.value
        if isinstance(value, str):
            return value
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as e:
                raise UnsupportedAttributeShape(
                    f"Name of entry 0x{self.offset:x} is not valid UTF-8"
                ) from e
        raise UnsupportedAttributeShape(
            f"Name of entry 0x{self.offset:x} has form {attr.form}"
        )

    def type_offset(self) -> int | None:
        attr = self._attribute(DW_AT_TYPE)
        if attr is None:
            return None
        return self._reference_offset(attr)

    def _reference_offset(self, attr: AttributeValue) -> int:
        """Section offset a reference attribute points at."""
        if attr.form in UNIT_REFERENCE_FORMS:
            return int(attr.value) + int(self._die.cu.cu_offset)
        if attr.form in SECTION_REFERENCE_FORMS:
            return int(attr.value)
        raise UnsupportedAttributeShape(
            f"{attr.name} of entry 0x{self.offset:x} has non-reference form {attr.form}"
        )

    def location(self, attribute: str) -> LocationValue | None:
        attr = self._attribute(attribute)
        if attr is None:
            return None
        if attr.form in EXPRESSION_FORMS:
            return list(attr.value)
        if attr.form in CONSTANT_FORMS:
            return int(attr.value)
        raise UnsupportedAttributeShape(
            f"{attribute} of entry 0x{self.offset:x} has form {attr.form}"
        )

    def referenced_entry(self, attribute: str) -> DebugEntry | None:
        attr = self._attribute(attribute)
        if attr is None:
            return None

        # Validates the form before pyelftools follows it
        self._reference_offset(attr)
        try:
            target = self._die.get_DIE_from_attribute(attribute)
        except DWARFError as e:
            raise UnsupportedAttributeShape(
                f"{attribute} of entry 0x{self.offset:x} cannot be followed: {e}"
            ) from e
        except KeyError as e:
            raise _unknown_code(self.offset, e) from e
        return ElftoolsEntry(target)

    def children(self) -> Iterator[DebugEntry]:
        for child in _decoded_children(self._die):
            yield ElftoolsEntry(child)


class ElftoolsUnit(DebugUnit):
    """DebugUnit over a pyelftools CompileUnit."""

    def __init__(self, cu: CompileUnit):
        self._cu = cu
        self._evaluator = LocationEvaluator(cu.structs)

    @property
    def offset(self) -> int:
        return int(self._cu.cu_offset)

    @property
    def length(self) -> int:
        return int(self._cu["unit_length"]) + self._cu.structs.initial_length_field_size()

    @property
    def version(self) -> int:
        return int(self._cu["version"])

    @property
    def evaluator(self) -> LocationEvaluator:
        return self._evaluator

    def top_entry(self) -> DebugEntry:
        try:
            top = self._cu.get_top_DIE()
        except KeyError as e:
            raise _unknown_code(self.offset, e) from e
        return ElftoolsEntry(top)


class ElftoolsDebugInfo(DebugInfoSource):
    """DebugInfoSource enumerating the units of a DWARFInfo."""

    def __init__(self, dwarf_info: DWARFInfo):
        self.dwarf_info = dwarf_info

    def iter_units(self) -> Iterator[DebugUnit]:
        for cu in self.dwarf_info.iter_CUs():
            unit = ElftoolsUnit(cu)
            logger.debug(
                f"Unit at 0x{unit.offset:x}: DWARF {unit.version}, "
                f"address size {cu['address_size']}"
            )
            yield unit


def _section_descriptor(container: CoffFile, name: str) -> DebugSectionDescriptor:
    data = container.section_data(name)
    return DebugSectionDescriptor(
        stream=BytesIO(data),
        name=name,
        global_offset=0,
        size=len(data),
        address=0,
    )


def _optional_section(container: CoffFile, keyword: str) -> DebugSectionDescriptor | None:
    """Descriptor for a DWARFInfo ``<name>_sec`` keyword, or None when absent."""
    section_name = "." + keyword[: -len("_sec")]
    if container.get_section(section_name) is None:
        return None
    return _section_descriptor(container, section_name)


@log_timing
def load_debug_info(container: CoffFile, address_size: int = 4) -> ElftoolsDebugInfo:
    """Build a debug-info source from the DWARF sections of ``container``.

    Args:
        container: Parsed COFF file
        address_size: Address size assumed where a unit does not state one

    Returns:
        Source enumerating the container's compilation units
    """
    for name in REQUIRED_SECTIONS:
        if container.get_section(name) is None:
            logger.warning(f"No {name} section; the map will be empty")

    config = DwarfConfig(
        little_endian=True,
        machine_arch=container.header.machine_name,
        default_address_size=address_size,
    )

    optional = {
        keyword: _optional_section(container, keyword) for keyword in OPTIONAL_SECTION_ARGUMENTS
    }
    dwarf_info = DWARFInfo(
        config=config,
        debug_info_sec=_section_descriptor(container, ".debug_info"),
        debug_abbrev_sec=_section_descriptor(container, ".debug_abbrev"),
        **optional,
    )
    return ElftoolsDebugInfo(dwarf_info)
