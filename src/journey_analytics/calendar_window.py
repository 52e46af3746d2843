"""Calendar window for the journey dashboard grid.

A window is a fixed run of Monday week starts. It anchors at the week of the
earliest known workout so the grid starts where the journey started; with no
workouts it ends at the current week instead.
"""

import logging
from collections.abc import Iterable
from datetime import date, timedelta

from .logging import journey_extra
from .models import DAYS_PER_WEEK, CalendarWindow, WorkoutMarker
from .utils import DEFAULT_ASSUMED_TIMEZONE, local_date_for_timezone, week_start

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_WEEKS = 12


def workout_days(
    markers: Iterable[WorkoutMarker],
    timezone_name: str = DEFAULT_ASSUMED_TIMEZONE,
) -> set[date]:
    """Collapse workout markers to the set of local dates with a workout."""
    return {local_date_for_timezone(m.occurred_at, timezone_name) for m in markers}


def earliest_workout_day(
    markers: Iterable[WorkoutMarker],
    timezone_name: str = DEFAULT_ASSUMED_TIMEZONE,
) -> date | None:
    days = workout_days(markers, timezone_name)
    return min(days) if days else None


def _consecutive_mondays(first: date, weeks: int) -> CalendarWindow:
    return CalendarWindow(
        tuple(first + timedelta(days=DAYS_PER_WEEK * i) for i in range(weeks))
    )


def _current_week_window(today: date, weeks: int) -> CalendarWindow:
    last = week_start(today)
    first = last - timedelta(days=DAYS_PER_WEEK * (weeks - 1))
    return _consecutive_mondays(first, weeks)


def window_for_anchor(
    anchor_day: date | None,
    today: date,
    window_size_weeks: int = DEFAULT_WINDOW_WEEKS,
) -> CalendarWindow:
    """Build the window from an already-resolved earliest workout date.

    A future anchor (clock skew) is accepted as-is.
    """
    if window_size_weeks < 1:
        raise ValueError("window_size_weeks must be at least 1")

    if anchor_day is None:
        return _current_week_window(today, window_size_weeks)

    try:
        return _consecutive_mondays(week_start(anchor_day), window_size_weeks)
    except OverflowError:
        logger.warning(
            "Calendar window overflowed from anchor %s; falling back to current week",
            anchor_day.isoformat(),
            extra=journey_extra(anchor=anchor_day.isoformat(), weeks=window_size_weeks),
        )
        return _current_week_window(today, window_size_weeks)


def build_window(
    workout_markers: Iterable[WorkoutMarker],
    today: date,
    window_size_weeks: int = DEFAULT_WINDOW_WEEKS,
    timezone_name: str = DEFAULT_ASSUMED_TIMEZONE,
) -> CalendarWindow:
    """Compute the Monday-aligned week starts to display.

    Pure function of its inputs.
    """
    anchor = earliest_workout_day(workout_markers, timezone_name)
    return window_for_anchor(anchor, today, window_size_weeks)


def window_dates(window: CalendarWindow) -> list[date]:
    """Materialize every date in the window (weeks x 7)."""
    return window.dates()
