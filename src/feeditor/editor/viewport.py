from __future__ import annotations

import math
from dataclasses import dataclass

from feeditor.editor.grid import GridCoord, MapGrid, MapUnit

MIN_ZOOM = 16.0
MAX_ZOOM = 128.0
DEFAULT_ZOOM = 64.0
MOUSE_WHEEL_ZOOM_SPEED = 3.0
KEYBOARD_ZOOM_SPEED = 32.0
KEYBOARD_DRAG_SPEED = 1024.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass
class Viewport:
    """Pan/zoom transform between screen pixels and grid cells.

    A cell ``(gx, gy)`` is drawn at ``gx * zoom + pan_x + origin_x``.
    """

    origin_x: float = 0.0
    origin_y: float = 0.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = DEFAULT_ZOOM

    def screen_to_grid(self, pixel_x: float, pixel_y: float) -> tuple[float, float]:
        return (
            (pixel_x - self.pan_x - self.origin_x) / self.zoom,
            (pixel_y - self.pan_y - self.origin_y) / self.zoom,
        )

    def grid_to_screen(self, grid_x: float, grid_y: float) -> tuple[float, float]:
        return (
            grid_x * self.zoom + self.pan_x + self.origin_x,
            grid_y * self.zoom + self.pan_y + self.origin_y,
        )

    def zoom_around(self, target_zoom: float, anchor: tuple[float, float]) -> float:
        """Set zoom (clamped) keeping the grid point ``anchor`` fixed on screen.

        Returns the applied delta ``old_zoom - new_zoom``.
        """
        new_zoom = clamp(target_zoom, MIN_ZOOM, MAX_ZOOM)
        delta = self.zoom - new_zoom
        self.zoom = new_zoom
        self.pan_x += anchor[0] * delta
        self.pan_y += anchor[1] * delta
        return delta

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_x += dx
        self.pan_y += dy


@dataclass(frozen=True)
class FrameInput:
    """Raw input sampled by the host for one frame."""

    pointer_x: float
    pointer_y: float
    delta_time: float = 0.0
    hovered: bool = True
    wheel: float = 0.0
    zoom_in_held: bool = False
    zoom_out_held: bool = False
    left_held: bool = False
    right_held: bool = False
    up_held: bool = False
    down_held: bool = False
    primary_down: bool = False
    secondary_down: bool = False
    middle_down: bool = False
    drag_dx: float = 0.0
    drag_dy: float = 0.0


@dataclass(frozen=True)
class FrameOutcome:
    pointer_grid: tuple[float, float] | None = None
    hovered_cell: GridCoord | None = None
    show_preview: bool = False
    painted: GridCoord | None = None
    info_target: GridCoord | None = None
    drag_consumed: bool = False


def process_frame(viewport: Viewport, grid: MapGrid, frame: FrameInput, *, selected_tile: int) -> FrameOutcome:
    if not frame.hovered:
        return FrameOutcome()

    grid_x, grid_y = viewport.screen_to_grid(frame.pointer_x, frame.pointer_y)

    keyboard_zoom = 0.0
    if frame.zoom_in_held:
        keyboard_zoom += KEYBOARD_ZOOM_SPEED * frame.delta_time
    if frame.zoom_out_held:
        keyboard_zoom -= KEYBOARD_ZOOM_SPEED * frame.delta_time
    viewport.zoom_around(viewport.zoom + frame.wheel * MOUSE_WHEEL_ZOOM_SPEED + keyboard_zoom, (grid_x, grid_y))

    step = KEYBOARD_DRAG_SPEED * frame.delta_time
    if frame.left_held:
        viewport.pan_by(step, 0.0)
    if frame.right_held:
        viewport.pan_by(-step, 0.0)
    if frame.up_held:
        viewport.pan_by(0.0, step)
    if frame.down_held:
        viewport.pan_by(0.0, -step)

    drag_consumed = False
    if frame.drag_dx != 0.0 or frame.drag_dy != 0.0:
        viewport.pan_by(frame.drag_dx, frame.drag_dy)
        drag_consumed = True

    cell_x = math.floor(grid_x)
    cell_y = math.floor(grid_y)
    if not grid.in_bounds(cell_x, cell_y):
        return FrameOutcome(pointer_grid=(grid_x, grid_y), drag_consumed=drag_consumed)

    cell = GridCoord(cell_x, cell_y)
    painted = None
    if frame.primary_down:
        grid.set_tile(cell_x, cell_y, selected_tile)
        painted = cell
    return FrameOutcome(
        pointer_grid=(grid_x, grid_y),
        hovered_cell=cell,
        show_preview=not frame.middle_down,
        painted=painted,
        info_target=cell if frame.secondary_down else None,
        drag_consumed=drag_consumed,
    )


@dataclass(frozen=True)
class UnitPick:
    index: int
    unit: MapUnit


@dataclass(frozen=True)
class SpawnPick:
    index: int
    coord: GridCoord


@dataclass(frozen=True)
class EmptyPick:
    coord: GridCoord
    can_place_unit: bool


Pick = UnitPick | SpawnPick | EmptyPick


def resolve_pick(grid: MapGrid, coord: GridCoord, *, class_count: int) -> Pick:
    # Co-located units: the first one in placement order wins.
    for index, unit in enumerate(grid.units):
        if (unit.x, unit.y) == (coord.x, coord.y):
            return UnitPick(index=index, unit=unit)
    for index, spawn in enumerate(grid.spawns):
        if spawn == coord:
            return SpawnPick(index=index, coord=spawn)
    return EmptyPick(coord=coord, can_place_unit=class_count > 0)


class InfoContext:
    """Inspect popup state for one cell; all edits go through the grid."""

    def __init__(self, grid: MapGrid, target: GridCoord) -> None:
        self.grid = grid
        self.target = target

    def pick(self, *, class_count: int) -> Pick:
        return resolve_pick(self.grid, self.target, class_count=class_count)

    def place_unit(self, *, class_count: int, class_index: int = 0) -> MapUnit | None:
        if class_count <= 0:
            return None
        unit = MapUnit.at_position(self.target, class_index=class_index)
        self.grid.place_unit(unit)
        return unit

    def mark_spawn(self) -> None:
        self.grid.place_spawn(self.target)

    def delete(self, pick: Pick) -> None:
        if isinstance(pick, UnitPick):
            self.grid.remove_unit(pick.index)
        elif isinstance(pick, SpawnPick):
            self.grid.remove_spawn(pick.index)

    def set_unit_class(self, pick: UnitPick, class_index: int) -> None:
        if pick.unit.class_index != class_index:
            pick.unit.class_index = class_index
            self.grid.touch()

    def rename_unit(self, pick: UnitPick, name: str) -> None:
        if pick.unit.name != name:
            pick.unit.name = name
            self.grid.touch()
