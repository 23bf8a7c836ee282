from pathlib import Path

import pygame
import pytest

from feeditor.cli.textures import TILE_SIZE, ScaledSurfaceCache, build_cursor_surface, load_class_icons, slice_tileset


def test_slice_tileset_splits_row_by_row() -> None:
    image = pygame.Surface((TILE_SIZE * 2, TILE_SIZE * 2))
    image.fill((10, 0, 0), pygame.Rect(TILE_SIZE, 0, TILE_SIZE, TILE_SIZE))
    image.fill((0, 20, 0), pygame.Rect(0, TILE_SIZE, TILE_SIZE, TILE_SIZE))

    tiles = slice_tileset(image)

    assert len(tiles) == 4
    assert all(tile.get_size() == (TILE_SIZE, TILE_SIZE) for tile in tiles)
    assert tiles[1].get_at((0, 0))[:3] == (10, 0, 0)
    assert tiles[2].get_at((0, 0))[:3] == (0, 20, 0)


def test_slice_tileset_rejects_partial_tiles() -> None:
    with pytest.raises(ValueError, match="not a multiple of 16"):
        slice_tileset(pygame.Surface((TILE_SIZE + 1, TILE_SIZE)))


def test_class_icons_are_sorted_by_file_name(tmp_path: Path) -> None:
    icons_dir = tmp_path / "class-icons"
    icons_dir.mkdir()
    for name in ("knight.png", "archer.png"):
        pygame.image.save(pygame.Surface((TILE_SIZE, TILE_SIZE)), str(icons_dir / name))
    (icons_dir / "notes.txt").write_text("not an icon", encoding="utf-8")

    icons = load_class_icons(icons_dir)

    assert list(icons) == ["archer.png", "knight.png"]


def test_scaled_cache_reuses_surfaces_until_size_changes() -> None:
    cache = ScaledSurfaceCache()
    cursor = build_cursor_surface()

    first = cache.get(cursor, 32)
    assert cache.get(cursor, 32) is first
    assert first.get_size() == (32, 32)
    assert cache.get(cursor, 48).get_size() == (48, 48)
