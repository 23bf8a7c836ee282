from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from feeditor.content.errors import ContentError, ValidationError
from feeditor.content.io import document_path, list_documents, load_document, write_atomic_text
from feeditor.editor.config import EditorConfig
from feeditor.editor.entries import ClassEntry
from feeditor.editor.grid import MapGrid
from feeditor.editor.lists import CharacterEditor, ClassEditor, EntityListEditor, ItemEditor

AUTOSAVE_FREQUENCY = 2.0
NEW_MAP_MIN_WIDTH = 15
NEW_MAP_MIN_HEIGHT = 10


class EditorSession:
    """Editors plus the open map, and the load/save/autosave boundary.

    Content errors never escape ``open_map``/``save``/``autosave``: they are
    reported through ``status_message`` and stderr and the in-memory state is
    left as it was.
    """

    def __init__(
        self,
        config: EditorConfig,
        *,
        classes: ClassEditor | None = None,
        items: ItemEditor | None = None,
        characters: CharacterEditor | None = None,
    ) -> None:
        self.config = config
        self.classes = classes if classes is not None else ClassEditor()
        self.items = items if items is not None else ItemEditor()
        self.characters = characters if characters is not None else CharacterEditor()
        self.map: MapGrid | None = None
        self._map_saved_version: int | None = None
        self._autosaved_versions: tuple[Any, ...] | None = None
        self.autosave_timer = 0.0
        self.status_message: str | None = None

    @classmethod
    def open(cls, config: EditorConfig, *, default_icon: str | None = None) -> "EditorSession":
        root = config.project_root
        return cls(
            config,
            classes=ClassEditor.open(root, default_icon=default_icon),
            items=ItemEditor.open(root),
            characters=CharacterEditor.open(root),
        )

    @property
    def editors(self) -> tuple[EntityListEditor[Any], ...]:
        return (self.classes, self.items, self.characters)

    @property
    def map_dirty(self) -> bool:
        return self.map is not None and self.map.version != self._map_saved_version

    @property
    def dirty(self) -> bool:
        return self.map_dirty or any(editor.dirty for editor in self.editors)

    def _versions(self) -> tuple[Any, ...]:
        map_version = (self.map.name, self.map.version) if self.map is not None else None
        return (*(editor.version for editor in self.editors), map_version)

    def _report_error(self, message: str) -> None:
        self.status_message = message
        print(f"[feeditor.session] {message}", file=sys.stderr)

    def list_maps(self) -> list[str]:
        return list_documents(self.config.maps_dir)

    def new_map(self, name: str, width: int, height: int) -> MapGrid:
        if not name:
            raise ValidationError("map must have a name")
        self.map = MapGrid.with_size(name, max(width, NEW_MAP_MIN_WIDTH), max(height, NEW_MAP_MIN_HEIGHT))
        self._map_saved_version = None
        self.status_message = f"created {name} ({self.map.width}x{self.map.height})"
        return self.map

    def open_map(self, name: str) -> bool:
        try:
            grid = MapGrid.open(self.config.maps_dir, name)
        except ContentError as exc:
            self._report_error(f"cannot load level: {exc}")
            return False
        self.map = grid
        self._map_saved_version = grid.version
        self.status_message = f"opened {name}"
        print(f"[feeditor.session] opened map={name} size={grid.width}x{grid.height} units={len(grid.units)}")
        return True

    def _render_project(self, directory: Path) -> list[tuple[Path, str]]:
        """Serialize every document up front so a bad record writes nothing."""
        outputs = [(directory / editor.file_name, editor.to_toml()) for editor in self.editors]
        if self.map is not None:
            outputs.append((document_path(directory / "maps", self.map.name), self.map.to_toml()))
        return outputs

    def _write_project(self, directory: Path) -> list[Path]:
        outputs = self._render_project(directory)
        for path, text in outputs:
            write_atomic_text(path, text)
        return [path for path, _ in outputs]

    def save(self) -> bool:
        for editor in self.editors:
            editor.recompute_dirty()
        versions = [editor.version for editor in self.editors]
        map_version = self.map.version if self.map is not None else None
        try:
            paths = self._write_project(self.config.project_root)
        except ContentError as exc:
            self._report_error(f"save failed: {exc}")
            return False
        for editor, version in zip(self.editors, versions):
            editor.mark_saved(version)
        self._map_saved_version = map_version
        self.status_message = "saved"
        print(f"[feeditor.session] saved files={len(paths)} root={self.config.project_root}")
        return True

    def autosave(self) -> bool:
        if not self.dirty:
            return False
        versions = self._versions()
        if versions == self._autosaved_versions:
            return False
        try:
            self._write_project(self.config.autosave_dir)
        except ContentError as exc:
            print(f"[feeditor.session] autosave failed: {exc}", file=sys.stderr)
            return False
        self._autosaved_versions = versions
        print(f"[feeditor.session] autosaved root={self.config.autosave_dir}")
        return True

    def begin_frame(self) -> None:
        for editor in self.editors:
            editor.begin_frame()

    def end_frame(self, delta_time: float) -> None:
        for editor in self.editors:
            editor.recompute_dirty()
            editor.compact()
        if self.autosave_timer > AUTOSAVE_FREQUENCY:
            self.autosave()
            self.autosave_timer -= AUTOSAVE_FREQUENCY
        self.autosave_timer += delta_time

    def referenced_class_indices(self) -> set[int]:
        referenced: set[int] = set()
        open_name = self.map.name if self.map is not None else None
        if self.map is not None:
            referenced |= self.map.referenced_class_indices()
        for name in self.list_maps():
            if name == open_name:
                continue
            document = load_document(document_path(self.config.maps_dir, name))
            referenced |= MapGrid.from_document(name, document).referenced_class_indices()
        return referenced

    def delete_class(self, entry: ClassEntry) -> None:
        """Soft-delete a class unless a placed unit depends on its position.

        Units refer to classes by position, so removing a class shifts every
        later class down by one; that is refused while any unit on any map
        refers to this class or a later one.
        """
        position = next(
            (index for index, candidate in enumerate(self.classes.open_entries()) if candidate is entry),
            None,
        )
        if position is None:
            return
        blocking = sorted(index for index in self.referenced_class_indices() if index >= position)
        if blocking:
            raise ValidationError(
                f"cannot delete class {entry.display_name()}: placed units use class indices {blocking}"
            )
        self.classes.mark_closed(entry)
