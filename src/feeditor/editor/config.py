from __future__ import annotations

import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path

from feeditor.content.errors import ParseError
from feeditor.content.io import read_text

DEFAULT_CONFIG_PATH = "fe-editor.toml"


@dataclass(frozen=True)
class EditorConfig:
    """Project root and the paths derived from it."""

    project_root: Path = Path(".")

    @property
    def maps_dir(self) -> Path:
        return self.project_root / "maps"

    @property
    def class_icons_dir(self) -> Path:
        return self.project_root / "class-icons"

    @property
    def tileset_path(self) -> Path:
        return self.project_root / "tileset.png"

    @property
    def autosave_dir(self) -> Path:
        return self.project_root / "autosave"

    @classmethod
    def open(cls, path: str | Path = DEFAULT_CONFIG_PATH) -> "EditorConfig":
        config_path = Path(path)
        if not config_path.exists():
            print(
                f"[feeditor.config] warning: config file not found path={config_path}; "
                "treating current directory as project root",
                file=sys.stderr,
            )
            return cls()

        try:
            document = tomllib.loads(read_text(config_path))
        except tomllib.TOMLDecodeError as exc:
            raise ParseError(str(exc), source=config_path) from exc
        project_root = Path(".")
        for key, value in document.items():
            if key == "project":
                if isinstance(value, str):
                    project_root = Path(value)
                else:
                    print(f"[feeditor.config] warning: project must be a string (found {type(value).__name__}); ignored", file=sys.stderr)
            else:
                print(f"[feeditor.config] warning: unrecognized key {key}", file=sys.stderr)
        return cls(project_root=project_root)
