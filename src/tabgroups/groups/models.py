"""Group data models shared by the store, the snapshot, and the binding generator."""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator, model_validator

_HEX_DIGITS = set("0123456789abcdef")


class FileReference(BaseModel):
    """A tracked editor resource.

    Attributes:
        display_name: Presentation label shown by the host; not unique.
        path: Absolute path identifying the resource.
    """

    model_config = ConfigDict(populate_by_name=True)

    display_name: str = Field(alias="name")
    path: str


class GroupRecord(BaseModel):
    """Persisted form of a group; the name is the key of the enclosing mapping."""

    color: str
    files: List[FileReference] = Field(default_factory=list)

    @field_validator("color")
    @classmethod
    def _validate_color(cls, value: str) -> str:
        digits = value[1:].lower() if value.startswith("#") else ""
        if len(digits) != 6 or not set(digits) <= _HEX_DIGITS:
            raise ValueError(f"color must be a #RRGGBB hex string, got {value!r}")
        return value


class Group(GroupRecord):
    """A named, colored, ordered collection of tracked files."""

    name: str

    def paths(self) -> list[str]:
        return [entry.path for entry in self.files]

    def to_record(self) -> GroupRecord:
        return GroupRecord(color=self.color, files=[entry.model_copy() for entry in self.files])


class GroupSnapshot(RootModel[Dict[str, GroupRecord]]):
    """Serializable copy of the store: group name to group record."""

    root: Dict[str, GroupRecord] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_exclusive_paths(self) -> "GroupSnapshot":
        holders: dict[str, str] = {}
        for name, record in self.root.items():
            for entry in record.files:
                if entry.path in holders:
                    raise ValueError(
                        f"{entry.path} is held by both {holders[entry.path]!r} and {name!r}"
                    )
                holders[entry.path] = name
        return self

    def to_payload(self) -> dict:
        """Return the JSON-ready mapping using the on-disk field names."""
        return self.model_dump(mode="json", by_alias=True)


__all__ = ["FileReference", "GroupRecord", "Group", "GroupSnapshot"]
