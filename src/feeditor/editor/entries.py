from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar
from uuid import UUID, uuid4

from feeditor.content.errors import ValidationError
from feeditor.content.schema import optional_str, require_str


@dataclass(eq=False)
class ListEntry:
    """Named record edited through an entity list editor.

    ``uuid`` keys per-record UI state and is never written to disk; ``name``
    is the persisted identity and becomes the document table key.
    """

    kind: ClassVar[str] = "entry"

    name: str = ""
    desc: str = ""
    uuid: UUID = field(default_factory=uuid4)
    is_open: bool = True

    def is_new(self) -> bool:
        return len(self.name) == 0

    def close(self) -> None:
        self.is_open = False

    def display_name(self) -> str:
        return self.name if not self.is_new() else f"New {self.kind}"

    def persisted_fields(self) -> dict[str, Any]:
        return {"name": self.name, "desc": self.desc}

    def to_document(self) -> dict[str, Any]:
        if self.is_new():
            raise ValidationError(f"{self.kind} entry has a blank name")
        return {"desc": self.desc}


@dataclass(eq=False)
class ClassEntry(ListEntry):
    kind: ClassVar[str] = "class"

    icon: str | None = None

    def persisted_fields(self) -> dict[str, Any]:
        return {**super().persisted_fields(), "icon": self.icon}

    def to_document(self) -> dict[str, Any]:
        document = super().to_document()
        if self.icon is not None:
            document["icon"] = self.icon
        return document

    @classmethod
    def from_document(cls, name: str, table: dict[str, Any], *, default_icon: str | None = None) -> "ClassEntry":
        return cls(
            name=name,
            desc=require_str(table, "desc", prefix=name),
            icon=optional_str(table, "icon", default_icon, prefix=name),
        )


@dataclass(eq=False)
class ItemEntry(ListEntry):
    kind: ClassVar[str] = "item"

    @classmethod
    def from_document(cls, name: str, table: dict[str, Any]) -> "ItemEntry":
        return cls(name=name, desc=require_str(table, "desc", prefix=name))


@dataclass(eq=False)
class CharacterEntry(ListEntry):
    """Roster character; ``desc`` holds the background text."""

    kind: ClassVar[str] = "character"

    class_name: str = ""

    def persisted_fields(self) -> dict[str, Any]:
        return {**super().persisted_fields(), "class": self.class_name}

    def to_document(self) -> dict[str, Any]:
        return {**super().to_document(), "class": self.class_name}

    @classmethod
    def from_document(cls, name: str, table: dict[str, Any]) -> "CharacterEntry":
        return cls(
            name=name,
            desc=require_str(table, "desc", prefix=name),
            class_name=optional_str(table, "class", "", prefix=name) or "",
        )
