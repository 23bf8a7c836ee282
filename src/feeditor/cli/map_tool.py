from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from feeditor.content.io import document_path
from feeditor.editor.config import EditorConfig
from feeditor.editor.grid import MapGrid
from feeditor.editor.hash import map_hash
from feeditor.editor.lists import ClassEditor
from feeditor.editor.session import NEW_MAP_MIN_HEIGHT, NEW_MAP_MIN_WIDTH


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feeditor-map",
        description="Create or validate level documents under a project's maps/ directory.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    new_parser = subparsers.add_parser("new", help="Write an empty level filled with the default tile")
    new_parser.add_argument("name", help="Level name (file stem under maps/)")
    new_parser.add_argument("--width", type=int, default=NEW_MAP_MIN_WIDTH, help="Level width in cells")
    new_parser.add_argument("--height", type=int, default=NEW_MAP_MIN_HEIGHT, help="Level height in cells")
    new_parser.add_argument("--project", default=".", help="Project root (default: current directory)")
    new_parser.add_argument("--force", action="store_true", help="Overwrite the level if it already exists")

    check_parser = subparsers.add_parser("check", help="Load a level and report its summary")
    check_parser.add_argument("name", help="Level name (file stem under maps/)")
    check_parser.add_argument("--project", default=".", help="Project root (default: current directory)")
    return parser


def _summary(grid: MapGrid, path: Path) -> str:
    return (
        f"path={path} "
        f"size={grid.width}x{grid.height} "
        f"units={len(grid.units)} "
        f"spawns={len(grid.spawns)} "
        f"map_hash={map_hash(grid)}"
    )


def _missing_classes(grid: MapGrid, project_root: Path) -> list[int]:
    class_count = len(ClassEditor.open(project_root).open_entries())
    return sorted(index for index in grid.referenced_class_indices() if index >= class_count)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    config = EditorConfig(project_root=Path(args.project))

    try:
        if args.command == "new":
            if not args.name:
                raise ValueError("level must have a name")
            path = document_path(config.maps_dir, args.name)
            if path.exists() and not args.force:
                raise ValueError(f"output exists: {path} (use --force to overwrite)")
            grid = MapGrid.with_size(
                args.name,
                max(args.width, NEW_MAP_MIN_WIDTH),
                max(args.height, NEW_MAP_MIN_HEIGHT),
            )
            grid.save(config.maps_dir)
        else:
            path = document_path(config.maps_dir, args.name)
            grid = MapGrid.open(config.maps_dir, args.name)
            missing = _missing_classes(grid, config.project_root)
            if missing:
                print(f"warning: units reference undefined class indices {missing}")

        print(f"ok {_summary(grid, path)}")
    except Exception as exc:
        print(f"error: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
