#!/usr/bin/env python3

"""Projection of resolved globals onto map file entries."""

from ....infrastructure.logging import get_logger, log_timing
from ...models.dwarf import StructMember, TypeCollection, Variable
from ...models.mapfile import MapEntry

logger = get_logger(__name__)


class MapEntryProjector:
    """Turns a resolved TypeCollection into the ordered map entry list.

    Top-level entries carry a name, an address and a type name; nested entries
    carry a name, a type name and the byte offset within their parent.
    Type names come from the structure's display name, else the base type's.
    """

    def __init__(self, types: TypeCollection):
        self.types = types

    @log_timing
    def project(self) -> list[MapEntry]:
        entries = [self.project_variable(var) for var in self.types.globals]
        logger.debug(f"Projected {len(entries)} map entries")
        return entries

    def project_variable(self, var: Variable) -> MapEntry:
        return MapEntry(
            name=var.name,
            addr=var.address,
            type=self.types.type_name(var.type_offset),
            fields=[self.project_member(member) for member in var.fields],
        )

    def project_member(self, member: StructMember) -> MapEntry:
        return MapEntry(
            name=member.name,
            type=self.types.type_name(member.type_offset),
            offset=member.member_offset,
            fields=[self.project_member(child) for child in member.fields],
        )
