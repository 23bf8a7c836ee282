from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Generic, Iterator, TypeVar

from feeditor.content.document import serialize
from feeditor.content.errors import SchemaError, ValidationError
from feeditor.content.io import load_optional_document, save_document
from feeditor.editor.entries import CharacterEntry, ClassEntry, ItemEntry, ListEntry
from feeditor.editor.hash import entries_hash

EntryT = TypeVar("EntryT", bound=ListEntry)


class EntityListEditor(Generic[EntryT]):
    """Ordered collection of one record kind with search and dirty tracking.

    Deletion is two-phase: ``mark_closed`` only flags a record, and the
    record leaves ``entries`` at the next ``compact`` call, which the frame
    loop issues after all iteration over the list is done.

    ``dirty`` compares a version counter against the version last saved.
    Every mutating call bumps the version; in-place field edits are picked up
    by ``recompute_dirty``, which compares a structural digest against the
    digest seen at ``begin_frame``.
    """

    title: ClassVar[str] = "Entries"
    kind: ClassVar[str] = ListEntry.kind
    file_name: ClassVar[str] = "entries.toml"

    def __init__(self, entries: list[EntryT] | None = None) -> None:
        self.entries: list[EntryT] = list(entries or [])
        self.search = ""
        self.is_shown = True
        self.version = 0
        self.saved_version = 0
        self._frame_digest = self.content_digest()

    def new_entry(self) -> EntryT:
        raise NotImplementedError

    def entry_from_document(self, name: str, table: dict[str, Any]) -> EntryT:
        raise NotImplementedError

    @property
    def dirty(self) -> bool:
        return self.version != self.saved_version

    def content_digest(self) -> str:
        return entries_hash(entry.persisted_fields() for entry in self.entries if entry.is_open)

    def _bump(self) -> None:
        self.version += 1
        self._frame_digest = self.content_digest()

    def add_entry(self) -> EntryT:
        entry = self.new_entry()
        self.entries.append(entry)
        self._bump()
        return entry

    def filter(self, query: str | None = None) -> Iterator[EntryT]:
        needle = (self.search if query is None else query).lower()
        for entry in self.entries:
            if not entry.is_open:
                continue
            if needle and needle not in entry.name.lower():
                continue
            yield entry

    def open_entries(self) -> list[EntryT]:
        return [entry for entry in self.entries if entry.is_open]

    def find(self, uuid: Any) -> EntryT | None:
        for entry in self.entries:
            if entry.uuid == uuid:
                return entry
        return None

    def mark_closed(self, entry: EntryT) -> None:
        if entry.is_open:
            entry.close()
            self._bump()

    def compact(self) -> list[EntryT]:
        """Drop closed records and return them."""
        removed = [entry for entry in self.entries if not entry.is_open]
        if removed:
            self.entries = [entry for entry in self.entries if entry.is_open]
        return removed

    def begin_frame(self) -> None:
        self._frame_digest = self.content_digest()

    def recompute_dirty(self) -> bool:
        current = self.content_digest()
        if current != self._frame_digest:
            self.version += 1
            self._frame_digest = current
        return self.dirty

    def mark_saved(self, version: int | None = None) -> None:
        self.saved_version = self.version if version is None else version

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {}
        for entry in self.open_entries():
            table = entry.to_document()
            if entry.name in document:
                raise ValidationError(f"duplicate {entry.kind} name: {entry.name}")
            document[entry.name] = table
        return document

    def to_toml(self) -> str:
        return serialize(self.to_document())

    def save(self, directory: str | Path) -> Path:
        path = Path(directory) / self.file_name
        save_document(path, self.to_document())
        return path

    def load_document(self, document: dict[str, Any]) -> None:
        entries: list[EntryT] = []
        for name, table in document.items():
            if not isinstance(table, dict):
                raise SchemaError(name, "a table")
            entries.append(self.entry_from_document(name, table))
        self.entries = entries
        self._frame_digest = self.content_digest()

    def load(self, directory: str | Path) -> None:
        document = load_optional_document(Path(directory) / self.file_name)
        self.load_document(document or {})


class ClassEditor(EntityListEditor[ClassEntry]):
    title = "Classes"
    kind = ClassEntry.kind
    file_name = "classes.toml"

    def __init__(self, entries: list[ClassEntry] | None = None, *, default_icon: str | None = None) -> None:
        super().__init__(entries)
        self.default_icon = default_icon

    def new_entry(self) -> ClassEntry:
        return ClassEntry(icon=self.default_icon)

    def entry_from_document(self, name: str, table: dict[str, Any]) -> ClassEntry:
        return ClassEntry.from_document(name, table, default_icon=self.default_icon)

    @classmethod
    def open(cls, directory: str | Path, *, default_icon: str | None = None) -> "ClassEditor":
        editor = cls(default_icon=default_icon)
        editor.load(directory)
        return editor

    def class_name(self, index: int) -> str | None:
        classes = self.open_entries()
        if 0 <= index < len(classes):
            return classes[index].name
        return None


class ItemEditor(EntityListEditor[ItemEntry]):
    title = "Items"
    kind = ItemEntry.kind
    file_name = "items.toml"

    def new_entry(self) -> ItemEntry:
        return ItemEntry()

    def entry_from_document(self, name: str, table: dict[str, Any]) -> ItemEntry:
        return ItemEntry.from_document(name, table)

    @classmethod
    def open(cls, directory: str | Path) -> "ItemEditor":
        editor = cls()
        editor.load(directory)
        return editor


class CharacterEditor(EntityListEditor[CharacterEntry]):
    title = "Characters"
    kind = CharacterEntry.kind
    file_name = "characters.toml"

    def new_entry(self) -> CharacterEntry:
        return CharacterEntry()

    def entry_from_document(self, name: str, table: dict[str, Any]) -> CharacterEntry:
        return CharacterEntry.from_document(name, table)

    @classmethod
    def open(cls, directory: str | Path) -> "CharacterEditor":
        editor = cls()
        editor.load(directory)
        return editor
