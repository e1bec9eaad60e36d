# Overview: Loads category snapshots exported from the category service into a CategoryGraph.

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..models import CategoryRecord
from ..validation import ValidationError
from .graph_service import CategoryGraph


class SnapshotError(ValueError):
    """Raised when a snapshot file cannot be read or parsed."""


def parse_snapshot(payload: Any) -> CategoryGraph:
    """
    Accepts either a JSON array of category objects or the service's
    envelope shape: {"categories": [...]}. Errors name the offending index.
    """
    if isinstance(payload, dict):
        if "categories" not in payload:
            raise SnapshotError("Snapshot object must contain a 'categories' list")
        payload = payload["categories"]
    if not isinstance(payload, list):
        raise SnapshotError("Snapshot must be a list of categories")

    records = []
    for index, item in enumerate(payload):
        try:
            records.append(CategoryRecord.from_dict(item))
        except ValidationError as exc:
            raise SnapshotError(f"Category #{index}: {exc}") from exc

    return CategoryGraph.from_records(records)


def load_snapshot(path: str | Path) -> CategoryGraph:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except OSError as exc:
        raise SnapshotError(f"Cannot read snapshot {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Invalid JSON in {path}: {exc}") from exc
    return parse_snapshot(payload)
