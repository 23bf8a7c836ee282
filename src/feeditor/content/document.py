from __future__ import annotations

import json
import re
import tomllib
from pathlib import Path
from typing import Any

from feeditor.content.errors import ParseError, SchemaError

DOCUMENT_VALUE_KINDS = "an integer, string, array or table"
ROW_INDENT = "\t"

_BARE_KEY = re.compile(r"[A-Za-z0-9_-]+")


def _normalize_value(value: Any, *, field_name: str) -> Any:
    if isinstance(value, bool):
        raise SchemaError(field_name, DOCUMENT_VALUE_KINDS)
    if isinstance(value, (int, str)):
        return value
    if isinstance(value, list):
        return [_normalize_value(item, field_name=f"{field_name}[{index}]") for index, item in enumerate(value)]
    if isinstance(value, dict):
        return {
            key: _normalize_value(nested, field_name=f"{field_name}.{key}" if field_name else key)
            for key, nested in value.items()
        }
    raise SchemaError(field_name, DOCUMENT_VALUE_KINDS)


def parse(text: str, *, source: str | Path | None = None) -> dict[str, Any]:
    """Parse TOML text into a document table of ints, strings, lists and dicts."""
    try:
        raw = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ParseError(str(exc), source=source) from exc
    return _normalize_value(raw, field_name="")


def _format_key(key: str) -> str:
    if _BARE_KEY.fullmatch(key):
        return key
    return _format_string(key)


def _format_string(value: str) -> str:
    # JSON escapes are a subset of TOML basic-string escapes, except DEL.
    return json.dumps(value, ensure_ascii=False).replace("\x7f", "\\u007f")


def _format_inline(value: Any, *, field_name: str) -> str:
    if isinstance(value, bool):
        raise SchemaError(field_name, DOCUMENT_VALUE_KINDS)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return _format_string(value)
    if isinstance(value, list):
        if not value:
            return "[]"
        items = [_format_inline(item, field_name=f"{field_name}[{index}]") for index, item in enumerate(value)]
        return "[" + ", ".join(items) + "]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        pairs = [
            f"{_format_key(key)} = {_format_inline(nested, field_name=f'{field_name}.{key}')}"
            for key, nested in value.items()
        ]
        return "{ " + ", ".join(pairs) + " }"
    raise SchemaError(field_name, DOCUMENT_VALUE_KINDS)


def _format_value(value: Any, *, field_name: str, row_width: int | None = None) -> str:
    if isinstance(value, list) and value and all(isinstance(item, dict) for item in value):
        rows = [f"{ROW_INDENT}{_format_inline(item, field_name=f'{field_name}[{index}]')}" for index, item in enumerate(value)]
        return "[\n" + ",\n".join(rows) + "\n]"
    if isinstance(value, list) and value and row_width is not None and row_width > 0:
        rows = []
        for start in range(0, len(value), row_width):
            chunk = value[start : start + row_width]
            cells = [_format_inline(item, field_name=f"{field_name}[{start + offset}]") for offset, item in enumerate(chunk)]
            rows.append(ROW_INDENT + ", ".join(cells))
        return "[\n" + ",\n".join(rows) + "\n]"
    return _format_inline(value, field_name=field_name)


def serialize(document: dict[str, Any], *, row_widths: dict[str, int] | None = None) -> str:
    """Render a document table as deterministic TOML text.

    Plain keys come first, then one ``[section]`` per nested table. Arrays of
    tables are written one inline table per line; ``row_widths`` breaks the
    named arrays into fixed-width rows. No element list ends with a trailing
    separator.
    """
    if not isinstance(document, dict):
        raise SchemaError("document", "a table")
    widths = row_widths or {}
    lines: list[str] = []
    sections: list[tuple[str, dict[str, Any]]] = []
    for key, value in document.items():
        if isinstance(value, dict):
            sections.append((key, value))
            continue
        lines.append(f"{_format_key(key)} = {_format_value(value, field_name=key, row_width=widths.get(key))}")

    for key, table in sections:
        if lines:
            lines.append("")
        lines.append(f"[{_format_key(key)}]")
        for nested_key, nested in table.items():
            lines.append(f"{_format_key(nested_key)} = {_format_value(nested, field_name=f'{key}.{nested_key}')}")

    return "\n".join(lines) + "\n" if lines else ""
