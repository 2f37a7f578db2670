#!/usr/bin/env python3

"""Structure member model."""

from dataclasses import dataclass, field


@dataclass
class StructMember:
    """A named member of a structure.

    ``fields`` stays empty until resolution, and afterwards is only filled
    when ``type_offset`` names a known structure.
    """

    name: str
    type_offset: int
    member_offset: int
    fields: list["StructMember"] = field(default_factory=list)

    def bare(self) -> "StructMember":
        """Copy of this member without its resolved field tree."""
        return StructMember(self.name, self.type_offset, self.member_offset)
