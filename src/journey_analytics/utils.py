"""Shared calendar and timezone helpers for the journey analytics engine."""

from datetime import date, datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_ASSUMED_TIMEZONE = "UTC"

# Calendar weekday numbering used for Monday anchoring: Sunday=1 .. Saturday=7.
SUNDAY = 1


# ---------------------------------------------------------------------------
# Timezones
# ---------------------------------------------------------------------------


def normalize_timezone_name(value: Any) -> str | None:
    """IANA zone name the journey calendar can use, or ``None`` if unusable.

    Accepts untrusted input (preference payloads, env vars, CLI flags).
    """
    candidate = value.strip() if isinstance(value, str) else ""
    if not candidate:
        return None
    if candidate.upper() == DEFAULT_ASSUMED_TIMEZONE:
        return DEFAULT_ASSUMED_TIMEZONE
    try:
        ZoneInfo(candidate)
    except (ZoneInfoNotFoundError, ValueError):
        return None
    return candidate


def local_date_for_timezone(ts: datetime, timezone_name: str) -> date:
    """Project a timestamp onto its start-of-day date in the configured zone.

    Naive timestamps are treated as UTC.
    """
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(ZoneInfo(timezone_name)).date()


def local_day_bounds(day: date, timezone_name: str) -> tuple[datetime, datetime]:
    """Return the UTC half-open interval [start, end) covering a local day."""
    tz = ZoneInfo(timezone_name)
    start = datetime(day.year, day.month, day.day, tzinfo=tz)
    end = start + timedelta(days=1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Week arithmetic
# ---------------------------------------------------------------------------


def sunday_based_weekday(d: date) -> int:
    """Weekday with Sunday=1 .. Saturday=7.

    ``date.weekday()`` is Monday=0 .. Sunday=6, so the offsets differ from
    calendars that count from Sunday.
    """
    return (d.weekday() + 1) % 7 + 1


def week_start(d: date) -> date:
    """Monday of the week containing ``d``, regardless of locale first weekday.

    Sunday steps back 6 days; any other day steps back ``weekday - 2`` days.
    """
    weekday = sunday_based_weekday(d)
    days_from_monday = 6 if weekday == SUNDAY else weekday - 2
    return d - timedelta(days=days_from_monday)


def daterange(start: date, days: int) -> list[date]:
    """``days`` consecutive dates starting at ``start``."""
    return [start + timedelta(days=offset) for offset in range(days)]
