#!/usr/bin/env python3

"""Map file entry model."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class MapEntry:
    """One variable (top level) or member (nested) of the map file.

    Unknown values are None; they and an empty ``fields`` list are left out
    of the serialized form.
    """

    name: str | None = None
    addr: int | None = None
    type: str | None = None
    offset: int | None = None
    fields: list["MapEntry"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.addr is not None:
            data["addr"] = self.addr
        if self.type is not None:
            data["type"] = self.type
        if self.offset is not None:
            data["offset"] = self.offset
        if self.name is not None:
            data["name"] = self.name
        if self.fields:
            data["fields"] = [child.to_dict() for child in self.fields]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MapEntry":
        return cls(
            name=data.get("name"),
            addr=data.get("addr"),
            type=data.get("type"),
            offset=data.get("offset"),
            fields=[cls.from_dict(child) for child in data.get("fields", [])],
        )
