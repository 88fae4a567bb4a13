"""Calendar-day helpers in a user's timezone.

Dates cross module boundaries as ``YYYY-MM-DD`` strings so they compare and
serialize the same way everywhere.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Asia/Jerusalem"


def resolve_zone(tz_name: str | None, default: str = DEFAULT_TIMEZONE) -> ZoneInfo:
    """Return the ZoneInfo for tz_name, falling back to the default zone."""
    if tz_name:
        try:
            return ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Invalid timezone %r, falling back to %s", tz_name, default)
    return ZoneInfo(default)


def local_date(tz_name: str | None = None, now: datetime | None = None, default: str = DEFAULT_TIMEZONE) -> str:
    """Current calendar date (YYYY-MM-DD) in the given timezone."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(resolve_zone(tz_name, default)).date().isoformat()


def is_same_day(first: str | None, second: str | None) -> bool:
    return bool(first) and first == second


def days_between(start: str | None, end: str | None) -> int:
    """Whole days from start to end. 0 when either side is missing."""
    if not start or not end:
        return 0
    return (date.fromisoformat(end) - date.fromisoformat(start)).days


def is_consecutive_day(previous: str | None, current: str | None) -> bool:
    """True when current is exactly one calendar day after previous."""
    return days_between(previous, current) == 1
