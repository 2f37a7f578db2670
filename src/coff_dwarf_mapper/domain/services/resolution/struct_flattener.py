#!/usr/bin/env python3

"""Recursive member flattening with cycle protection.

Each structure's members get their nested ``fields`` filled from the
structures their types name. Expansion keeps the chain of structures
currently being expanded; a member whose structure is already on that chain
is kept with empty fields instead of being expanded again, so no structure
appears twice on a single root-to-leaf path.

Results are memoized by structure identity together with the set of
structures they contain. A cached tree is reused only when it stopped at no
structure above it and contains nothing on the current chain, so every tree
is the same whichever root reached it first.
"""

import copy
from dataclasses import dataclass

from ....infrastructure.logging import get_logger, log_timing
from ...errors import ResolutionCycle
from ...models.dwarf import Structure, StructMember

logger = get_logger(__name__)

_NO_CYCLE = 1 << 62


@dataclass
class _Expansion:
    members: list[StructMember]
    contained: frozenset[int]


class StructFlattener:
    """Flattens an offset-keyed structure map into self-contained member trees.

    Aliased entries (typedef offsets) share the ``type_offset`` identity of
    the structure they alias, and are expanded as that structure.
    """

    def __init__(self, structs: dict[int, Structure]):
        self.structs = structs
        self.cycles: list[ResolutionCycle] = []
        self._memo: dict[int, _Expansion] = {}
        self._path: list[int] = []

    @log_timing
    def flatten_all(self) -> dict[int, Structure]:
        """Return a new map with every structure fully flattened."""
        flattened = {
            offset: Structure(
                name=struct.name,
                type_offset=struct.type_offset,
                members=self.flatten(offset),
            )
            for offset, struct in sorted(self.structs.items())
        }
        if self.cycles:
            logger.warning(f"Stopped expansion at {len(self.cycles)} self-referential members")
        return flattened

    def flatten(self, offset: int) -> list[StructMember]:
        """Flattened members of the structure stored at ``offset``."""
        identity = self.structs[offset].type_offset
        expansion, _ = self._expand(identity)
        return expansion.members

    def _identity(self, offset: int) -> int:
        struct = self.structs.get(offset)
        if struct is None:
            return offset
        return struct.type_offset

    def _expand(self, identity: int) -> tuple[_Expansion, int]:
        """Expand one structure.

        Returns the expansion and the shallowest chain depth a cycle reached
        below it (_NO_CYCLE when none did).
        """
        cached = self._memo.get(identity)
        if cached is not None and cached.contained.isdisjoint(self._path):
            return _Expansion(copy.deepcopy(cached.members), cached.contained), _NO_CYCLE

        struct = self.structs.get(identity)
        if struct is None:
            return _Expansion([], frozenset()), _NO_CYCLE

        depth = len(self._path)
        lowest = _NO_CYCLE
        members: list[StructMember] = []
        contained = {identity}

        self._path.append(identity)
        try:
            for member in struct.members:
                resolved = member.bare()

                if member.type_offset in self.structs:
                    child = self._identity(member.type_offset)
                    if child in self._path:
                        cycle = ResolutionCycle(child, list(self._path))
                        logger.warning(f"{cycle}; member {member.name!r} left unexpanded")
                        self.cycles.append(cycle)
                        lowest = min(lowest, self._path.index(child))
                    else:
                        expansion, child_lowest = self._expand(child)
                        resolved.fields = expansion.members
                        contained |= expansion.contained
                        lowest = min(lowest, child_lowest)

                members.append(resolved)
        finally:
            self._path.pop()

        expansion = _Expansion(members, frozenset(contained))
        if lowest >= depth:
            self._memo[identity] = _Expansion(copy.deepcopy(members), expansion.contained)
        return expansion, lowest
