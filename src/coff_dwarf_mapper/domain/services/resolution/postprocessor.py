#!/usr/bin/env python3

"""Postprocessing of the collected type graph.

Runs after the debug-info walk and produces a new, fully resolved
TypeCollection:

1. Typedefs (and const/volatile qualifiers) are aliased onto the structure or
   base type their chain ends at, so lookups by the alias offset succeed.
2. Every structure is flattened into a self-contained member tree.
3. Each global whose type resolves to a structure gets that tree as fields.

Nothing here fails the run; an unresolvable reference just leaves the entry
without fields.
"""

import copy

from ....infrastructure.logging import get_logger, log_timing
from ...models.dwarf import Structure, TypeCollection, Variable
from .struct_flattener import StructFlattener

logger = get_logger(__name__)


class Postprocessor:
    """Resolves aliases and member trees of a TypeCollection."""

    def __init__(self, types: TypeCollection):
        self.source = types
        self.flattener: StructFlattener | None = None

    @log_timing
    def run(self) -> TypeCollection:
        """Return a resolved copy of the collection; the source is not modified."""
        resolved = self._copy_source()

        self.apply_typedefs(resolved)
        self.apply_qualifiers(resolved)

        self.flattener = StructFlattener(resolved.structs)
        resolved.structs = self.flattener.flatten_all()

        self.attach_globals(resolved)
        return resolved

    def _copy_source(self) -> TypeCollection:
        source = self.source
        return TypeCollection(
            base_types=dict(source.base_types),
            typedefs=dict(source.typedefs),
            structs={
                offset: Structure(
                    name=struct.name,
                    type_offset=struct.type_offset,
                    members=[member.bare() for member in struct.members],
                )
                for offset, struct in source.structs.items()
            },
            qualifiers=dict(source.qualifiers),
            globals=[
                Variable(name=var.name, address=var.address, type_offset=var.type_offset)
                for var in source.globals
            ],
        )

    @staticmethod
    def resolve_alias(types: TypeCollection, offset: int) -> tuple[int | None, str | None]:
        """Follow typedefs and qualifiers from ``offset`` to the type they end at.

        Returns the terminal offset and the name of the first typedef passed on
        the way (None when the chain has no typedef). A looping chain yields
        ``(None, None)``.
        """
        seen: set[int] = set()
        first_name: str | None = None

        while offset in types.typedefs or offset in types.qualifiers:
            if offset in seen:
                logger.warning(f"Typedef chain through 0x{offset:x} loops back on itself")
                return None, None
            seen.add(offset)

            typedef = types.typedefs.get(offset)
            if typedef is not None:
                if first_name is None:
                    first_name = typedef.name
                offset = typedef.type_offset
            else:
                offset = types.qualifiers[offset]

        return offset, first_name

    def apply_typedefs(self, types: TypeCollection) -> None:
        """Alias every typedef onto its terminal structure or base type.

        Typedefs are applied in ascending offset order. A structure takes the
        name of the first typedef that reaches it; each typedef offset gets a
        copy under its own name.
        """
        renamed: set[int] = set()

        for offset in sorted(types.typedefs):
            typedef = types.typedefs[offset]
            target, _ = self.resolve_alias(types, typedef.type_offset)
            if target is None:
                continue

            struct = types.structs.get(target)
            if struct is not None and struct.type_offset == target:
                if target not in renamed:
                    struct.name = typedef.name
                    renamed.add(target)
                types.structs[offset] = self._alias_struct(struct, typedef.name)
            elif target in types.base_types:
                types.base_types[offset] = types.base_types[target]
            else:
                logger.debug(
                    f"Typedef {typedef.name!r} at 0x{offset:x} names neither a structure "
                    f"nor a base type"
                )

    def apply_qualifiers(self, types: TypeCollection) -> None:
        """Make const/volatile offsets resolve like the type they qualify."""
        for offset in sorted(types.qualifiers):
            target, typedef_name = self.resolve_alias(types, offset)
            if target is None:
                continue

            struct = types.structs.get(target)
            if struct is not None:
                types.structs[offset] = self._alias_struct(struct, typedef_name or struct.name)
            elif target in types.base_types:
                types.base_types[offset] = types.base_types[target]

    @staticmethod
    def _alias_struct(struct: Structure, name: str | None) -> Structure:
        return Structure(
            name=name,
            type_offset=struct.type_offset,
            members=[member.bare() for member in struct.members],
        )

    def attach_globals(self, types: TypeCollection) -> None:
        """Give each global the member tree of its structure type."""
        attached = 0
        for var in types.globals:
            struct = types.resolve_struct(var.type_offset)
            if struct is None:
                continue
            var.fields = copy.deepcopy(struct.members)
            attached += 1

        logger.info(f"Resolved field trees for {attached} of {len(types.globals)} globals")
