from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date '{value}' (expected YYYY-MM-DD)")


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; empty values mean "not set".

    Aware values are converted to naive UTC, which is what the tasks table stores.
    """
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"Invalid date/time '{value}' (expected an ISO-8601 string)")
    v = (value or "").strip()
    if not v:
        return None
    try:
        parsed = datetime.fromisoformat(v.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid date/time '{value}'")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def now_utc() -> datetime:
    """Current UTC time as a naive datetime.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
