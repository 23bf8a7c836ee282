from __future__ import annotations

from typing import Any

from feeditor.content.errors import SchemaError


def _field_name(prefix: str, key: str) -> str:
    return f"{prefix}.{key}" if prefix else key


def _require(table: dict[str, Any], key: str, expected: str, prefix: str) -> Any:
    if key not in table:
        raise SchemaError(_field_name(prefix, key), expected, missing=True)
    return table[key]


def require_int(table: dict[str, Any], key: str, *, prefix: str = "") -> int:
    value = _require(table, key, "an integer", prefix)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaError(_field_name(prefix, key), "an integer")
    return value


def require_non_negative_int(table: dict[str, Any], key: str, *, prefix: str = "") -> int:
    value = _require(table, key, "a non-negative integer", prefix)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SchemaError(_field_name(prefix, key), "a non-negative integer")
    return value


def require_positive_int(table: dict[str, Any], key: str, *, prefix: str = "") -> int:
    value = _require(table, key, "a positive integer", prefix)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise SchemaError(_field_name(prefix, key), "a positive integer")
    return value


def require_str(table: dict[str, Any], key: str, *, prefix: str = "") -> str:
    value = _require(table, key, "a string", prefix)
    if not isinstance(value, str):
        raise SchemaError(_field_name(prefix, key), "a string")
    return value


def optional_str(table: dict[str, Any], key: str, default: str | None = None, *, prefix: str = "") -> str | None:
    if key not in table:
        return default
    return require_str(table, key, prefix=prefix)


def require_array(table: dict[str, Any], key: str, *, prefix: str = "") -> list[Any]:
    value = _require(table, key, "an array", prefix)
    if not isinstance(value, list):
        raise SchemaError(_field_name(prefix, key), "an array")
    return value


def require_table(table: dict[str, Any], key: str, *, prefix: str = "") -> dict[str, Any]:
    value = _require(table, key, "a table", prefix)
    if not isinstance(value, dict):
        raise SchemaError(_field_name(prefix, key), "a table")
    return value


def require_int_array(table: dict[str, Any], key: str, *, prefix: str = "", non_negative: bool = True) -> list[int]:
    values = require_array(table, key, prefix=prefix)
    expected = "a non-negative integer" if non_negative else "an integer"
    normalized: list[int] = []
    for index, value in enumerate(values):
        if isinstance(value, bool) or not isinstance(value, int) or (non_negative and value < 0):
            raise SchemaError(f"{_field_name(prefix, key)}[{index}]", expected)
        normalized.append(value)
    return normalized


def require_table_array(table: dict[str, Any], key: str, *, prefix: str = "") -> list[dict[str, Any]]:
    values = require_array(table, key, prefix=prefix)
    for index, value in enumerate(values):
        if not isinstance(value, dict):
            raise SchemaError(f"{_field_name(prefix, key)}[{index}]", "a table")
    return values
