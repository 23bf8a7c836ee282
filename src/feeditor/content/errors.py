from __future__ import annotations

from pathlib import Path


class ContentError(ValueError):
    """Base class for every recoverable load/save failure."""


class ParseError(ContentError):
    def __init__(self, message: str, *, source: str | Path | None = None) -> None:
        self.source = str(source) if source is not None else None
        if self.source is not None:
            message = f"failed to parse {self.source}: {message}"
        super().__init__(message)


class SchemaError(ContentError):
    """A required field is missing or has the wrong type."""

    def __init__(self, field_name: str, expected: str, *, missing: bool = False) -> None:
        self.field_name = field_name
        self.expected = expected
        self.missing = missing
        if missing:
            message = f"{field_name} not found (expected {expected})"
        else:
            message = f"{field_name} must be {expected}"
        super().__init__(message)


class ValidationError(ContentError):
    pass


class ContentIOError(ContentError):
    def __init__(self, path: str | Path, reason: OSError | str) -> None:
        self.path = Path(path)
        detail = reason.strerror if isinstance(reason, OSError) and reason.strerror else str(reason)
        super().__init__(f"cannot access {self.path}: {detail}")
