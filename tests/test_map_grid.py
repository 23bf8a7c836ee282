from pathlib import Path

import pytest

from feeditor.content.errors import ContentIOError, SchemaError
from feeditor.editor.grid import DEFAULT_TILE, GridCoord, MapGrid, MapUnit
from feeditor.editor.hash import map_hash


def _sample_grid() -> MapGrid:
    grid = MapGrid.with_size("intro", 15, 10)
    grid.set_tile(3, 4, 2)
    grid.place_unit(MapUnit(x=3, y=4, name="Bandit", class_index=1))
    grid.place_spawn(GridCoord(3, 5))
    return grid


def test_new_grid_is_filled_with_default_tile() -> None:
    grid = MapGrid.with_size("intro", 15, 10)

    assert len(grid.tiles) == 150
    assert set(grid.tiles) == {DEFAULT_TILE}
    assert grid.units == []
    assert grid.spawns == []


def test_grid_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError, match="must be > 0"):
        MapGrid.with_size("empty", 0, 10)


def test_tiles_are_row_major_and_bounds_checked() -> None:
    grid = MapGrid.with_size("intro", 15, 10)
    grid.set_tile(3, 4, 7)

    assert grid.tiles[3 + 4 * 15] == 7
    assert grid.get_tile(3, 4) == 7

    with pytest.raises(IndexError):
        grid.get_tile(15, 0)
    with pytest.raises(IndexError):
        grid.set_tile(-1, 0, 1)
    with pytest.raises(IndexError):
        grid.get_tile(0, 10)


def test_version_only_moves_on_real_changes() -> None:
    grid = MapGrid.with_size("intro", 15, 10)

    grid.set_tile(0, 0, DEFAULT_TILE)
    assert grid.version == 0

    grid.set_tile(0, 0, 1)
    grid.place_spawn(GridCoord(1, 1))
    grid.remove_spawn(0)
    assert grid.version == 3


def test_save_then_open_round_trip(tmp_path: Path) -> None:
    grid = _sample_grid()

    path = grid.save(tmp_path)
    loaded = MapGrid.open(tmp_path, "intro")

    assert path == tmp_path / "intro.toml"
    assert loaded == grid
    assert map_hash(loaded) == map_hash(grid)


def test_to_toml_writes_one_row_per_grid_row() -> None:
    text = MapGrid.with_size("intro", 15, 10).to_toml()

    rows = [line for line in text.splitlines() if line.startswith("\t0")]
    assert len(rows) == 10
    assert rows[0] == "\t" + ", ".join(["0"] * 15) + ","
    assert rows[-1] == "\t" + ", ".join(["0"] * 15)
    assert "units = []" in text
    assert "spawns = []" in text


def test_tile_count_mismatch_is_schema_error() -> None:
    document = {"width": 2, "height": 2, "data": [0, 0, 0], "units": [], "spawns": []}

    with pytest.raises(SchemaError, match="exactly 4 tiles"):
        MapGrid.from_document("bad", document)


def test_missing_and_malformed_fields_name_the_field() -> None:
    with pytest.raises(SchemaError, match="units not found"):
        MapGrid.from_document("bad", {"width": 1, "height": 1, "data": [0], "spawns": []})

    with pytest.raises(SchemaError, match=r"units\[0\]\.name not found"):
        MapGrid.from_document(
            "bad",
            {"width": 1, "height": 1, "data": [0], "units": [{"x": 0, "y": 0, "class": 0}], "spawns": []},
        )

    with pytest.raises(SchemaError, match=r"data\[1\] must be a non-negative integer"):
        MapGrid.from_document("bad", {"width": 2, "height": 1, "data": [0, -3], "units": [], "spawns": []})


def test_open_missing_map_is_io_error(tmp_path: Path) -> None:
    with pytest.raises(ContentIOError, match="cannot access"):
        MapGrid.open(tmp_path, "nowhere")


def test_queries_by_cell() -> None:
    grid = _sample_grid()
    grid.place_unit(MapUnit(x=3, y=4, name="Twin", class_index=3))

    assert [index for index, _ in grid.units_at(GridCoord(3, 4))] == [0, 1]
    assert grid.spawns_at(GridCoord(3, 5)) == [0]
    assert grid.spawns_at(GridCoord(3, 4)) == []
    assert grid.referenced_class_indices() == {1, 3}


def test_loads_blank_fifteen_by_ten_level(tmp_path: Path) -> None:
    (tmp_path / "blank.toml").write_text(
        "width = 15\nheight = 10\ndata = [" + ", ".join(["0"] * 150) + "]\nunits = []\nspawns = []\n",
        encoding="utf-8",
    )

    grid = MapGrid.open(tmp_path, "blank")

    assert (grid.name, grid.width, grid.height) == ("blank", 15, 10)
    assert grid.tiles == [0] * 150
    assert grid.units == []
    assert grid.spawns == []
    assert grid.get_tile(14, 9) == 0
    assert grid == MapGrid.with_size("blank", 15, 10)
