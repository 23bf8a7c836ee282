import pytest

from feeditor.editor.grid import GridCoord, MapGrid, MapUnit
from feeditor.editor.viewport import (
    DEFAULT_ZOOM,
    KEYBOARD_DRAG_SPEED,
    MAX_ZOOM,
    MIN_ZOOM,
    MOUSE_WHEEL_ZOOM_SPEED,
    EmptyPick,
    FrameInput,
    FrameOutcome,
    InfoContext,
    SpawnPick,
    UnitPick,
    Viewport,
    process_frame,
    resolve_pick,
)


def _pointer_over(x: int, y: int, zoom: float = DEFAULT_ZOOM) -> tuple[float, float]:
    return (x * zoom + zoom / 2, y * zoom + zoom / 2)


def test_zoom_keeps_anchor_fixed_on_screen() -> None:
    viewport = Viewport(origin_x=100.0, origin_y=30.0, pan_x=10.0, pan_y=-20.0)
    anchor = viewport.screen_to_grid(300.0, 200.0)

    delta = viewport.zoom_around(80.0, anchor)

    assert delta == pytest.approx(DEFAULT_ZOOM - 80.0)
    assert viewport.grid_to_screen(*anchor) == pytest.approx((300.0, 200.0))


def test_zoom_is_clamped() -> None:
    viewport = Viewport()

    viewport.zoom_around(1000.0, (0.0, 0.0))
    assert viewport.zoom == MAX_ZOOM

    viewport.zoom_around(1.0, (0.0, 0.0))
    assert viewport.zoom == MIN_ZOOM


def test_unhovered_frame_changes_nothing() -> None:
    viewport = Viewport()
    grid = MapGrid.with_size("intro", 15, 10)

    outcome = process_frame(
        viewport,
        grid,
        FrameInput(pointer_x=10.0, pointer_y=10.0, hovered=False, wheel=2.0, primary_down=True, drag_dx=4.0),
        selected_tile=3,
    )

    assert outcome == FrameOutcome()
    assert viewport == Viewport()
    assert grid.version == 0


def test_wheel_and_arrow_keys_move_the_view() -> None:
    viewport = Viewport()
    grid = MapGrid.with_size("intro", 15, 10)

    process_frame(viewport, grid, FrameInput(pointer_x=0.0, pointer_y=0.0, wheel=1.0), selected_tile=0)
    assert viewport.zoom == pytest.approx(DEFAULT_ZOOM + MOUSE_WHEEL_ZOOM_SPEED)

    viewport = Viewport()
    process_frame(
        viewport,
        grid,
        FrameInput(pointer_x=0.0, pointer_y=0.0, delta_time=0.5, left_held=True, down_held=True),
        selected_tile=0,
    )
    assert viewport.pan_x == pytest.approx(KEYBOARD_DRAG_SPEED * 0.5)
    assert viewport.pan_y == pytest.approx(-KEYBOARD_DRAG_SPEED * 0.5)


def test_drag_is_consumed_when_either_axis_moves() -> None:
    viewport = Viewport()
    grid = MapGrid.with_size("intro", 15, 10)

    outcome = process_frame(
        viewport,
        grid,
        FrameInput(pointer_x=5.0, pointer_y=5.0, middle_down=True, drag_dx=5.0),
        selected_tile=0,
    )

    assert outcome.drag_consumed is True
    assert (viewport.pan_x, viewport.pan_y) == (5.0, 0.0)
    assert outcome.show_preview is False

    still = process_frame(viewport, grid, FrameInput(pointer_x=5.0, pointer_y=5.0), selected_tile=0)
    assert still.drag_consumed is False


def test_primary_button_paints_hovered_cell() -> None:
    viewport = Viewport()
    grid = MapGrid.with_size("intro", 15, 10)
    pointer_x, pointer_y = _pointer_over(3, 4)

    outcome = process_frame(
        viewport,
        grid,
        FrameInput(pointer_x=pointer_x, pointer_y=pointer_y, primary_down=True),
        selected_tile=2,
    )

    assert outcome.hovered_cell == GridCoord(3, 4)
    assert outcome.painted == GridCoord(3, 4)
    assert outcome.show_preview is True
    assert grid.get_tile(3, 4) == 2
    assert grid.version == 1


def test_pointer_outside_grid_paints_nothing() -> None:
    viewport = Viewport()
    grid = MapGrid.with_size("intro", 15, 10)

    outcome = process_frame(
        viewport,
        grid,
        FrameInput(pointer_x=-5.0, pointer_y=-5.0, primary_down=True, secondary_down=True),
        selected_tile=2,
    )

    assert outcome.hovered_cell is None
    assert outcome.painted is None
    assert outcome.info_target is None
    assert grid.version == 0


def test_secondary_button_targets_cell_for_inspection() -> None:
    viewport = Viewport()
    grid = MapGrid.with_size("intro", 15, 10)
    pointer_x, pointer_y = _pointer_over(3, 5)

    outcome = process_frame(
        viewport,
        grid,
        FrameInput(pointer_x=pointer_x, pointer_y=pointer_y, secondary_down=True),
        selected_tile=0,
    )

    assert outcome.info_target == GridCoord(3, 5)
    assert outcome.painted is None


def test_pick_prefers_units_then_spawns() -> None:
    grid = MapGrid.with_size("intro", 15, 10)
    grid.place_unit(MapUnit(x=3, y=4, name="First", class_index=0))
    grid.place_unit(MapUnit(x=3, y=4, name="Second", class_index=1))
    grid.place_spawn(GridCoord(3, 4))
    grid.place_spawn(GridCoord(3, 5))

    unit_pick = resolve_pick(grid, GridCoord(3, 4), class_count=2)
    spawn_pick = resolve_pick(grid, GridCoord(3, 5), class_count=2)

    assert isinstance(unit_pick, UnitPick)
    assert unit_pick.index == 0
    assert unit_pick.unit.name == "First"
    assert spawn_pick == SpawnPick(index=1, coord=GridCoord(3, 5))


def test_empty_pick_reports_whether_a_unit_can_be_placed() -> None:
    grid = MapGrid.with_size("intro", 15, 10)

    assert resolve_pick(grid, GridCoord(3, 5), class_count=0) == EmptyPick(GridCoord(3, 5), can_place_unit=False)
    assert resolve_pick(grid, GridCoord(3, 5), class_count=1) == EmptyPick(GridCoord(3, 5), can_place_unit=True)


def test_info_context_edits_go_through_the_grid() -> None:
    grid = MapGrid.with_size("intro", 15, 10)
    info = InfoContext(grid, GridCoord(3, 4))

    assert info.place_unit(class_count=0) is None
    assert grid.units == []

    unit = info.place_unit(class_count=2)
    assert unit == MapUnit(x=3, y=4, name="", class_index=0)
    pick = info.pick(class_count=2)
    assert isinstance(pick, UnitPick)

    version = grid.version
    info.set_unit_class(pick, 1)
    info.rename_unit(pick, "Bandit")
    info.rename_unit(pick, "Bandit")
    assert grid.units[0] == MapUnit(x=3, y=4, name="Bandit", class_index=1)
    assert grid.version == version + 2

    info.delete(pick)
    assert grid.units == []

    info.mark_spawn()
    spawn = info.pick(class_count=2)
    assert isinstance(spawn, SpawnPick)
    info.delete(spawn)
    assert grid.spawns == []
    assert isinstance(info.pick(class_count=2), EmptyPick)
