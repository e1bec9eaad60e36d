from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def parse_category_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    created_at / updated_at as sent by the category service, as UTC-naive.

    The service writes "2025-01-15T10:30:00Z"; offsets are folded into UTC
    and offset-less values are taken as UTC already. Blank means unset.
    Raises ValueError when the text is not ISO-8601.
    """
    text = (value or "").strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"

    stamp = datetime.fromisoformat(text)
    if stamp.tzinfo is not None:
        stamp = stamp.astimezone(timezone.utc).replace(tzinfo=None)
    return stamp


def format_category_timestamp(stamp: Optional[datetime]) -> Optional[str]:
    """Inverse of parse_category_timestamp, to whole seconds with a trailing Z."""
    if stamp is None:
        return None
    if stamp.tzinfo is not None:
        stamp = stamp.astimezone(timezone.utc).replace(tzinfo=None)
    return stamp.replace(microsecond=0).isoformat() + "Z"
