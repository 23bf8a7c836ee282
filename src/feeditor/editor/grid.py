from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from feeditor.content.document import serialize
from feeditor.content.errors import SchemaError
from feeditor.content.io import document_path, load_document, save_document
from feeditor.content.schema import (
    require_int_array,
    require_non_negative_int,
    require_positive_int,
    require_str,
    require_table_array,
)

DEFAULT_TILE = 0


@dataclass(frozen=True, order=True)
class GridCoord:
    """Integer cell position inside a map grid."""

    x: int
    y: int

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, prefix: str = "") -> "GridCoord":
        return cls(
            x=require_non_negative_int(data, "x", prefix=prefix),
            y=require_non_negative_int(data, "y", prefix=prefix),
        )


@dataclass
class MapUnit:
    x: int
    y: int
    name: str = ""
    # Position in the class collection; not checked against it.
    class_index: int = 0

    @property
    def coord(self) -> GridCoord:
        return GridCoord(self.x, self.y)

    @classmethod
    def at_position(cls, coord: GridCoord, class_index: int = 0) -> "MapUnit":
        return cls(x=coord.x, y=coord.y, class_index=class_index)

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "name": self.name, "class": self.class_index}

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, prefix: str = "") -> "MapUnit":
        return cls(
            x=require_non_negative_int(data, "x", prefix=prefix),
            y=require_non_negative_int(data, "y", prefix=prefix),
            name=require_str(data, "name", prefix=prefix),
            class_index=require_non_negative_int(data, "class", prefix=prefix),
        )


@dataclass
class MapGrid:
    name: str
    width: int
    height: int
    tiles: list[int]
    units: list[MapUnit] = field(default_factory=list)
    spawns: list[GridCoord] = field(default_factory=list)
    version: int = field(default=0, compare=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("width and height must be > 0")
        if len(self.tiles) != self.width * self.height:
            raise ValueError(f"tile count {len(self.tiles)} does not match {self.width}x{self.height}")

    @classmethod
    def with_size(cls, name: str, width: int, height: int) -> "MapGrid":
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        return cls(name=name, width=width, height=height, tiles=[DEFAULT_TILE] * (width * height))

    @classmethod
    def from_document(cls, name: str, document: dict[str, Any]) -> "MapGrid":
        width = require_positive_int(document, "width")
        height = require_positive_int(document, "height")
        tiles = require_int_array(document, "data")
        if len(tiles) != width * height:
            raise SchemaError("data", f"an array of exactly {width * height} tiles (found {len(tiles)})")
        units = [
            MapUnit.from_dict(row, prefix=f"units[{index}]")
            for index, row in enumerate(require_table_array(document, "units"))
        ]
        spawns = [
            GridCoord.from_dict(row, prefix=f"spawns[{index}]")
            for index, row in enumerate(require_table_array(document, "spawns"))
        ]
        return cls(name=name, width=width, height=height, tiles=tiles, units=units, spawns=spawns)

    @classmethod
    def open(cls, directory: str | Path, name: str) -> "MapGrid":
        return cls.from_document(name, load_document(document_path(directory, name)))

    def to_document(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "data": list(self.tiles),
            "units": [unit.to_dict() for unit in self.units],
            "spawns": [spawn.to_dict() for spawn in self.spawns],
        }

    def to_toml(self) -> str:
        return serialize(self.to_document(), row_widths={"data": self.width})

    def save(self, directory: str | Path) -> Path:
        path = document_path(directory, self.name)
        save_document(path, self.to_document(), row_widths={"data": self.width})
        return path

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _tile_index(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            raise IndexError(f"tile ({x}, {y}) outside {self.width}x{self.height} map")
        return x + y * self.width

    def get_tile(self, x: int, y: int) -> int:
        return self.tiles[self._tile_index(x, y)]

    def set_tile(self, x: int, y: int, value: int) -> None:
        index = self._tile_index(x, y)
        if self.tiles[index] != value:
            self.tiles[index] = value
            self.version += 1

    def place_unit(self, unit: MapUnit) -> int:
        self.units.append(unit)
        self.version += 1
        return len(self.units) - 1

    def remove_unit(self, index: int) -> MapUnit:
        unit = self.units.pop(index)
        self.version += 1
        return unit

    def place_spawn(self, coord: GridCoord) -> int:
        self.spawns.append(coord)
        self.version += 1
        return len(self.spawns) - 1

    def remove_spawn(self, index: int) -> GridCoord:
        coord = self.spawns.pop(index)
        self.version += 1
        return coord

    def touch(self) -> None:
        """Record an in-place edit of a unit (rename, class change)."""
        self.version += 1

    def units_at(self, coord: GridCoord) -> list[tuple[int, MapUnit]]:
        return [(index, unit) for index, unit in enumerate(self.units) if (unit.x, unit.y) == (coord.x, coord.y)]

    def spawns_at(self, coord: GridCoord) -> list[int]:
        return [index for index, spawn in enumerate(self.spawns) if spawn == coord]

    def referenced_class_indices(self) -> set[int]:
        return {unit.class_index for unit in self.units}
