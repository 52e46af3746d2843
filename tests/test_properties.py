"""Property tests for the calendar, cache and streak invariants.

Run:
    pytest tests/test_properties.py -v --hypothesis-seed=42  # reproducible
"""

from __future__ import annotations

import asyncio
from datetime import date, timedelta

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from journey_analytics.achievement_cache import load_achievements
from journey_analytics.calendar_window import build_window
from journey_analytics.milestones import MILESTONES, milestone_status
from journey_analytics.models import AchievementState
from journey_analytics.streak import current_streak, longest_streak
from journey_analytics.utils import sunday_based_weekday, week_start
from journey_analytics.weight_trend import weekly_buckets

from .fakes import CALORIES, FakeAchievementSource, weight, workout

PROPERTY_SETTINGS = settings(
    max_examples=100,
    suppress_health_check=[HealthCheck.too_slow],
    deadline=None,
)

days = st.dates(min_value=date(1990, 1, 1), max_value=date(2100, 12, 31))
states = st.builds(
    AchievementState,
    calories_achieved=st.booleans(),
    protein_achieved=st.booleans(),
    carbs_achieved=st.booleans(),
    fat_achieved=st.booleans(),
)


class TestWeekArithmetic:
    @PROPERTY_SETTINGS
    @given(days)
    def test_week_start_is_monday_within_six_days(self, d):
        ws = week_start(d)
        assert ws.weekday() == 0
        assert timedelta(0) <= d - ws <= timedelta(days=6)

    @PROPERTY_SETTINGS
    @given(days)
    def test_sunday_based_weekday_range(self, d):
        assert 1 <= sunday_based_weekday(d) <= 7


class TestWindowInvariants:
    @PROPERTY_SETTINGS
    @given(
        workouts=st.lists(days, max_size=20),
        today=days,
        weeks=st.integers(min_value=1, max_value=60),
    )
    def test_shape(self, workouts, today, weeks):
        window = build_window([workout(d) for d in workouts], today, weeks)

        assert len(window) == weeks
        assert all(ws.weekday() == 0 for ws in window)
        assert all(b - a == timedelta(days=7) for a, b in zip(window, list(window)[1:]))
        if workouts:
            assert window.first_day == week_start(min(workouts))
        else:
            assert window.week_starts[-1] == week_start(today)

    @PROPERTY_SETTINGS
    @given(workouts=st.lists(days, min_size=1, max_size=20), today=days)
    def test_pure_in_marker_order(self, workouts, today):
        markers = [workout(d) for d in workouts]
        assert build_window(markers, today) == build_window(list(reversed(markers)), today)


class TestCacheTotality:
    @PROPERTY_SETTINGS
    @given(
        requested=st.sets(days, max_size=40),
        known=st.dictionaries(days, states, max_size=40),
    )
    def test_every_requested_date_present(self, requested, known):
        result = asyncio.run(load_achievements(FakeAchievementSource(known), requested))

        assert set(result) == requested
        for d in requested:
            assert result[d] == known.get(d, AchievementState.EMPTY)


class TestStreakProperties:
    @PROPERTY_SETTINGS
    @given(cache=st.dictionaries(days, states, max_size=60), today=days)
    def test_bounded_by_cap_and_longest(self, cache, today):
        streak = current_streak(cache, today)
        assert 0 <= streak <= 365
        past = {d: s for d, s in cache.items() if d <= today}
        assert streak <= longest_streak(past)

    @PROPERTY_SETTINGS
    @given(length=st.integers(min_value=0, max_value=400), today=days)
    def test_unbroken_run(self, length, today):
        cache = {today - timedelta(days=i): CALORIES for i in range(length)}
        assert current_streak(cache, today) == min(length, 365)


class TestMilestoneProperties:
    @PROPERTY_SETTINGS
    @given(st.integers(min_value=-10, max_value=1000))
    def test_ladder_membership(self, n):
        status = milestone_status(n)
        assert status.next in MILESTONES
        assert status.last_achieved in (0, *MILESTONES)
        assert status.last_achieved <= max(n, 0)
        assert 0.0 <= status.progress <= 1.0
        if n < 100:
            assert status.last_achieved < status.next


class TestWeightBucketProperties:
    @PROPERTY_SETTINGS
    @given(
        entries=st.lists(
            st.tuples(
                st.dates(min_value=date(2026, 1, 1), max_value=date(2026, 6, 30)),
                st.floats(min_value=40, max_value=200, allow_nan=False, allow_infinity=False),
            ),
            max_size=30,
        )
    )
    def test_averages_within_bucket_range(self, entries):
        weeks = [date(2026, 1, 5) + timedelta(weeks=i) for i in range(12)]
        buckets = weekly_buckets([weight(d, kg) for d, kg in entries], weeks)

        assert [b.week_start for b in buckets] == sorted(b.week_start for b in buckets)
        for bucket in buckets:
            members = [kg for d, kg in entries if bucket.week_start <= d <= bucket.week_end]
            assert bucket.samples == len(members) > 0
            assert min(members) - 1e-9 <= bucket.average <= max(members) + 1e-9
