from __future__ import annotations

import hashlib
import json
from typing import Any, Iterable

from feeditor.editor.grid import MapGrid


def _digest(payload: Any) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def entries_hash(fields: Iterable[dict[str, Any]]) -> str:
    return _digest(list(fields))


def map_hash(grid: MapGrid) -> str:
    return _digest({"name": grid.name, **grid.to_document()})
