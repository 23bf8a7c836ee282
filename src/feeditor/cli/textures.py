from __future__ import annotations

from pathlib import Path
from typing import Any

TILE_SIZE = 16
ICON_SUFFIXES = {".png", ".bmp", ".gif", ".jpg", ".jpeg", ".tga"}
CURSOR_COLOR = (255, 236, 120, 255)

pygame: Any | None = None


def _ensure_pygame_imported() -> Any:
    global pygame
    if pygame is None:
        import pygame as pygame_module

        pygame = pygame_module
    return pygame


def slice_tileset(image: Any, tile_size: int = TILE_SIZE) -> list[Any]:
    """Split a tileset surface into tile surfaces, row by row."""
    width, height = image.get_size()
    if width % tile_size != 0 or height % tile_size != 0:
        raise ValueError(f"image width or height is not a multiple of {tile_size}")
    tiles = []
    for y in range(0, height, tile_size):
        for x in range(0, width, tile_size):
            tiles.append(image.subsurface((x, y, tile_size, tile_size)).copy())
    return tiles


def load_tileset(path: str | Path, tile_size: int = TILE_SIZE) -> list[Any]:
    pygame_module = _ensure_pygame_imported()
    return slice_tileset(pygame_module.image.load(str(path)), tile_size)


def load_class_icons(directory: str | Path) -> dict[str, Any]:
    """Icons keyed by file name, in sorted order; the first is the default icon."""
    pygame_module = _ensure_pygame_imported()
    root = Path(directory)
    root.mkdir(parents=True, exist_ok=True)
    icons: dict[str, Any] = {}
    for entry in sorted(root.iterdir()):
        if entry.is_file() and entry.suffix.lower() in ICON_SUFFIXES:
            icons[entry.name] = pygame_module.image.load(str(entry))
    return icons


def build_cursor_surface(size: int = TILE_SIZE) -> Any:
    pygame_module = _ensure_pygame_imported()
    surface = pygame_module.Surface((size, size), pygame_module.SRCALPHA)
    corner = max(2, size // 4)
    for x0, y0, dx, dy in ((0, 0, 1, 1), (size - 1, 0, -1, 1), (0, size - 1, 1, -1), (size - 1, size - 1, -1, -1)):
        pygame_module.draw.line(surface, CURSOR_COLOR, (x0, y0), (x0 + dx * corner, y0))
        pygame_module.draw.line(surface, CURSOR_COLOR, (x0, y0), (x0, y0 + dy * corner))
    return surface


class ScaledSurfaceCache:
    """Scaled copies of source surfaces for the current zoom level."""

    def __init__(self) -> None:
        self._size = 0
        self._cache: dict[int, Any] = {}

    def get(self, surface: Any, size: int) -> Any:
        if size != self._size:
            self._cache.clear()
            self._size = size
        key = id(surface)
        scaled = self._cache.get(key)
        if scaled is None:
            scaled = _ensure_pygame_imported().transform.scale(surface, (size, size))
            self._cache[key] = scaled
        return scaled
