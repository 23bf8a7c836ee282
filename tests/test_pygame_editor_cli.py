from pathlib import Path

import pytest

from feeditor.cli.pygame_editor import (
    DragTracker,
    _build_parser,
    _env_flag_enabled,
    build_entry_menu_items,
    build_file_menu_items,
    build_info_menu_items,
    parse_new_map_request,
)
from feeditor.editor.config import EditorConfig
from feeditor.editor.entries import ClassEntry
from feeditor.editor.grid import GridCoord, MapGrid, MapUnit
from feeditor.editor.lists import ClassEditor
from feeditor.editor.session import EditorSession
from feeditor.editor.viewport import InfoContext


def _session(tmp_path: Path, *class_names: str) -> EditorSession:
    classes = ClassEditor([ClassEntry(name=name, desc="") for name in class_names])
    session = EditorSession(EditorConfig(project_root=tmp_path), classes=classes)
    session.new_map("intro", 15, 10)
    return session


def test_editor_parser_defaults() -> None:
    args = _build_parser().parse_args([])

    assert args.config == "fe-editor.toml"
    assert args.headless is False


def test_editor_parser_accepts_config_and_headless() -> None:
    args = _build_parser().parse_args(["--config", "projects/demo.toml", "--headless"])

    assert args.config == "projects/demo.toml"
    assert args.headless is True


@pytest.mark.parametrize(("value", "expected"), [("1", True), ("Yes", True), (" on ", True), ("0", False), ("", False)])
def test_headless_env_flag(monkeypatch, value: str, expected: bool) -> None:
    monkeypatch.setenv("FEEDITOR_HEADLESS", value)

    assert _env_flag_enabled("FEEDITOR_HEADLESS") is expected


def test_parse_new_map_request() -> None:
    assert parse_new_map_request("intro") == ("intro", 15, 10)
    assert parse_new_map_request("castle gate 20 12") == ("castle gate", 20, 12)

    with pytest.raises(ValueError, match="must have a name"):
        parse_new_map_request("   ")


def test_info_menu_for_empty_cell_without_classes(tmp_path: Path) -> None:
    session = _session(tmp_path)
    info = InfoContext(session.map, GridCoord(3, 5))

    actions = [(item.label, item.action) for item in build_info_menu_items(session, info)]

    assert ("Cannot create unit: no classes are defined", "noop") in actions
    assert ("Mark as spawn", "mark_spawn") in actions
    assert all(action != "place_unit" for _, action in actions)


def test_info_menu_for_unit_lists_other_classes(tmp_path: Path) -> None:
    session = _session(tmp_path, "Knight", "Archer")
    session.map.place_unit(MapUnit(x=3, y=4, name="Bandit", class_index=0))
    info = InfoContext(session.map, GridCoord(3, 4))

    items = build_info_menu_items(session, info)
    labels = [item.label for item in items]

    assert "Unit: Bandit" in labels
    assert "Class: Knight" in labels
    set_class = [item for item in items if item.action == "set_class"]
    assert [(item.label, item.payload) for item in set_class] == [("Set class: Archer", 1)]
    assert "delete_pick" in [item.action for item in items]


def test_info_menu_marks_missing_class(tmp_path: Path) -> None:
    session = _session(tmp_path, "Knight")
    session.map.place_unit(MapUnit(x=0, y=0, class_index=4))

    labels = [item.label for item in build_info_menu_items(session, InfoContext(session.map, GridCoord(0, 0)))]

    assert "Class: <missing class>" in labels


def test_file_menu_lists_saved_maps(tmp_path: Path) -> None:
    MapGrid.with_size("arena", 15, 10).save(tmp_path / "maps")
    session = _session(tmp_path)

    items = build_file_menu_items(session)

    assert [(item.action, item.payload) for item in items if item.action == "open_map"] == [("open_map", "arena")]
    assert items[0].action == "new_map"
    assert items[-1].action == "save"


def test_class_menu_targets_entry_by_uuid(tmp_path: Path) -> None:
    session = _session(tmp_path, "Knight")
    knight = session.classes.entries[0]

    items = build_entry_menu_items(session.classes, knight.uuid)

    assert items[0].label == "Knight"
    assert [item.action for item in items[1:]] == ["rename_entry", "describe_entry", "cycle_icon", "delete_entry"]
    assert items[-1].label == "Delete class"
    assert all(item.payload == knight.uuid for item in items[1:])


def test_character_menu_offers_class_assignment(tmp_path: Path) -> None:
    session = _session(tmp_path)
    ada = session.characters.add_entry()

    items = build_entry_menu_items(session.characters, ada.uuid)

    assert items[0].label == "New character"
    assert "set_character_class" in [item.action for item in items]
    assert "cycle_icon" not in [item.action for item in items]
    assert build_entry_menu_items(session.items, ada.uuid) == []


def test_drag_tracker_accumulates_until_reset() -> None:
    drag = DragTracker()

    drag.add(2.0, -1.0)
    drag.add(3.0, 0.0)
    assert (drag.dx, drag.dy) == (5.0, -1.0)

    drag.reset()
    assert (drag.dx, drag.dy) == (0.0, 0.0)


def test_drag_tracker_drops_motion_outside_viewport() -> None:
    drag = DragTracker()

    drag.add(40.0, 12.0)
    drag.settle(hovered=False, consumed=False)
    assert (drag.dx, drag.dy) == (0.0, 0.0)

    drag.add(3.0, 1.0)
    drag.settle(hovered=True, consumed=False)
    assert (drag.dx, drag.dy) == (3.0, 1.0)

    drag.settle(hovered=True, consumed=True)
    assert (drag.dx, drag.dy) == (0.0, 0.0)
