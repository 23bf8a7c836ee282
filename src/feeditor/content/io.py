from __future__ import annotations

import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from feeditor.content.document import parse, serialize
from feeditor.content.errors import ContentIOError

DOCUMENT_SUFFIX = ".toml"


def document_path(directory: str | Path, name: str) -> Path:
    return Path(directory) / f"{name}{DOCUMENT_SUFFIX}"


def read_text(path: str | Path) -> str:
    source = Path(path)
    try:
        return source.read_text(encoding="utf-8")
    except OSError as exc:
        raise ContentIOError(source, exc) from exc


def load_document(path: str | Path) -> dict[str, Any]:
    return parse(read_text(path), source=path)


def load_optional_document(path: str | Path) -> dict[str, Any] | None:
    if not Path(path).exists():
        return None
    return load_document(path)


def write_atomic_text(path: str | Path, text: str) -> None:
    destination = Path(path)
    temp_path: Path | None = None
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=destination.parent,
            delete=False,
            suffix=".tmp",
        ) as temp_file:
            temp_path = Path(temp_file.name)
            temp_file.write(text)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        os.replace(temp_path, destination)
    except OSError as exc:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise ContentIOError(destination, exc) from exc


def save_document(path: str | Path, document: dict[str, Any], *, row_widths: dict[str, int] | None = None) -> None:
    write_atomic_text(path, serialize(document, row_widths=row_widths))


def list_documents(directory: str | Path) -> list[str]:
    """Names (without suffix) of the documents in a directory, creating it if needed."""
    root = Path(directory)
    try:
        root.mkdir(parents=True, exist_ok=True)
        return sorted(entry.stem for entry in root.iterdir() if entry.is_file() and entry.suffix == DOCUMENT_SUFFIX)
    except OSError as exc:
        raise ContentIOError(root, exc) from exc
