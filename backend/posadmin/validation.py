# Overview: Input validation helpers shared by category parsing and CLI argument handling.

from __future__ import annotations
from datetime import datetime
from posadmin.time_utils import parse_category_timestamp

from typing import Any


class ValidationError(ValueError):
    """400-level input problem."""


def coerce_int(key: str, value: Any) -> int:
    # Integers - strict validation to reject floats and scientific notation
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    # Reject floats explicitly
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    raise ValidationError(f"{key} must be an integer")


def coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "y", "on"}:
            return True
        if lowered in {"0", "false", "no", "n", "off", ""}:
            return False
        raise ValidationError(f"{key} must be a boolean")
    if isinstance(value, int):
        return bool(value)
    raise ValidationError(f"{key} must be a boolean")


def coerce_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def coerce_datetime(key: str, value: Any) -> datetime | None:
    """Accept ISO-8601 strings (normalized to UTC) or datetime instances."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return parse_category_timestamp(value)
        except ValueError:
            raise ValidationError(f"{key} must be an ISO-8601 datetime")
    raise ValidationError(f"{key} must be a datetime")


def enforce_rules_category(*, product_count: int) -> None:
    """
    Business rules that the record shape alone does not capture.
    Keep these small and centralized.
    """
    if product_count < 0:
        raise ValidationError("productCount must be >= 0")
