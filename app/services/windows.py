"""
windows.py — Resolve the inclusive time window for rating analytics.

    from app.services.windows import resolve_window

    resolve_window()                          # the 30 days ending now
    resolve_window("2026-01-01", "2026-01-31")
    resolve_window(to="2026-02-01T12:00:00+05:30")

Bounds are ISO-8601 dates or date-times. A bare date is midnight UTC, a
naive date-time is read as UTC, and explicit offsets are converted to UTC.
The window is NOT reordered: from > to is passed through and simply
matches no reviews.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from app.models.stats import TimeWindow

DEFAULT_WINDOW_DAYS = 30


class InvalidWindowBoundary(ValueError):
    """A supplied from/to value is not a parseable date."""

    def __init__(self, param: str, value: str):
        self.param = param
        self.value = value
        super().__init__(f"Invalid date for '{param}': {value!r} (expected YYYY-MM-DD or ISO-8601)")


def parse_boundary(param: str, value: str) -> datetime:
    """Parse one window bound into an aware UTC datetime."""
    try:
        parsed = datetime.fromisoformat(value.strip())
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        # Offsets at the edges of the calendar overflow on conversion.
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        raise InvalidWindowBoundary(param, value) from None


def resolve_window(
    from_: Optional[str] = None,
    to: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
    days: int = DEFAULT_WINDOW_DAYS,
) -> TimeWindow:
    """
    Resolve [start, end] from optional caller-supplied bounds.

    Missing (or empty) `from_` → now - `days` days; missing `to` → now.
    The clock is read once, so both defaults share the same instant.
    Raises InvalidWindowBoundary for a malformed bound.
    """
    if now is None:
        now = datetime.now(tz=timezone.utc)

    start = parse_boundary("from", from_) if from_ else now - timedelta(days=days)
    end = parse_boundary("to", to) if to else now

    return TimeWindow(start=start, end=end)
