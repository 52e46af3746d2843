"""Tests for the calendar window builder."""

from datetime import date, datetime, timedelta, timezone

import pytest

from journey_analytics.calendar_window import (
    build_window,
    earliest_workout_day,
    window_dates,
    window_for_anchor,
    workout_days,
)
from journey_analytics.models import CalendarWindow, WorkoutMarker

from .fakes import workout

# 2026-02-25 is a Wednesday; its week starts Monday 2026-02-23.
TODAY = date(2026, 2, 25)


class TestAnchoredWindow:
    def test_anchors_at_monday_of_earliest_workout(self):
        # Wednesday three weeks ago
        markers = [workout(date(2026, 2, 10)), workout(date(2026, 2, 4)), workout(TODAY)]
        window = build_window(markers, TODAY)
        assert window.week_starts[0] == date(2026, 2, 2)
        assert window.week_starts[-1] == date(2026, 4, 20)
        assert window.week_starts[-1] == window.week_starts[0] + timedelta(weeks=11)

    def test_sunday_steps_back_six_days(self):
        # 2026-02-08 is a Sunday
        window = build_window([workout(date(2026, 2, 8))], TODAY)
        assert window.first_day == date(2026, 2, 2)

    def test_monday_is_its_own_week_start(self):
        window = build_window([workout(date(2026, 2, 2))], TODAY)
        assert window.first_day == date(2026, 2, 2)

    def test_saturday_belongs_to_preceding_monday(self):
        window = build_window([workout(date(2026, 2, 7))], TODAY)
        assert window.first_day == date(2026, 2, 2)

    def test_future_workout_still_anchors(self):
        window = build_window([workout(date(2026, 3, 18))], TODAY)
        assert window.first_day == date(2026, 3, 16)

    def test_many_workouts_same_day_collapse(self):
        day = date(2026, 2, 4)
        markers = [
            WorkoutMarker(occurred_at=datetime(2026, 2, 4, h, tzinfo=timezone.utc))
            for h in (6, 12, 18)
        ]
        assert workout_days(markers) == {day}
        assert build_window(markers, TODAY).first_day == date(2026, 2, 2)

    def test_timezone_moves_workout_into_next_week(self):
        # Sunday 23:30 UTC is already Monday in Berlin
        markers = [WorkoutMarker(occurred_at=datetime(2026, 2, 1, 23, 30, tzinfo=timezone.utc))]
        assert build_window(markers, TODAY, timezone_name="UTC").first_day == date(2026, 1, 26)
        assert build_window(markers, TODAY, timezone_name="Europe/Berlin").first_day == date(2026, 2, 2)


class TestEmptyHistoryWindow:
    def test_last_week_is_current_week(self):
        window = build_window([], TODAY)
        assert window.week_starts[-1] == date(2026, 2, 23)
        assert window.week_starts[0] == date(2025, 12, 8)

    def test_today_on_sunday(self):
        window = build_window([], date(2026, 3, 1))
        assert window.week_starts[-1] == date(2026, 2, 23)


class TestWindowShape:
    @pytest.mark.parametrize("markers", [[], [workout(date(2026, 2, 4))]])
    def test_twelve_mondays_seven_days_apart(self, markers):
        window = build_window(markers, TODAY)
        assert len(window) == 12
        for prev, cur in zip(window.week_starts, window.week_starts[1:]):
            assert (cur - prev).days == 7
        assert all(ws.weekday() == 0 for ws in window.week_starts)

    def test_custom_size(self):
        window = build_window([], TODAY, window_size_weeks=4)
        assert len(window) == 4
        assert window.week_starts[-1] == date(2026, 2, 23)

    def test_rejects_zero_weeks(self):
        with pytest.raises(ValueError):
            build_window([], TODAY, window_size_weeks=0)

    def test_window_dates_cover_84_days(self):
        window = build_window([workout(date(2026, 2, 4))], TODAY)
        dates = window_dates(window)
        assert len(dates) == 84
        assert dates[0] == date(2026, 2, 2)
        assert dates[-1] == window.last_day == date(2026, 4, 26)
        assert len(set(dates)) == 84

    def test_contains(self):
        window = build_window([workout(date(2026, 2, 4))], TODAY)
        assert window.contains(date(2026, 2, 2))
        assert window.contains(date(2026, 4, 26))
        assert not window.contains(date(2026, 2, 1))


class TestOverflowFallback:
    def test_overflow_falls_back_to_current_week(self):
        window = window_for_anchor(date.max, TODAY)
        assert window.week_starts[-1] == date(2026, 2, 23)
        assert len(window) == 12


class TestCalendarWindowInvariant:
    def test_rejects_uneven_spacing(self):
        with pytest.raises(ValueError):
            CalendarWindow((date(2026, 2, 2), date(2026, 2, 10)))

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            CalendarWindow(())


class TestEarliestWorkoutDay:
    def test_none_without_workouts(self):
        assert earliest_workout_day([]) is None

    def test_picks_minimum(self):
        markers = [workout(date(2026, 2, 10)), workout(date(2026, 1, 5))]
        assert earliest_workout_day(markers) == date(2026, 1, 5)
