"""Tests for the milestone ladder, motivational tiers and journey day count."""

from datetime import date

import pytest

from journey_analytics.milestones import (
    MILESTONES,
    journey_day,
    milestone_status,
    motivational_message,
)
from journey_analytics.models import MilestoneStatus


class TestMilestoneStatus:
    def test_ladder(self):
        assert MILESTONES == (25, 50, 75, 100)

    @pytest.mark.parametrize(
        ("days", "last", "nxt"),
        [
            (0, 0, 25),
            (10, 0, 25),
            (24, 0, 25),
            (25, 25, 50),
            (49, 25, 50),
            (50, 50, 75),
            (74, 50, 75),
            (75, 75, 100),
            (99, 75, 100),
            (100, 100, 100),
            (150, 100, 100),
            (365, 100, 100),
        ],
    )
    def test_last_and_next(self, days, last, nxt):
        status = milestone_status(days)
        assert (status.last_achieved, status.next) == (last, nxt)

    def test_saturates_after_ladder(self):
        status = milestone_status(150)
        assert status.next == 100
        assert status.last_achieved == 100
        assert status.progress == 1.0

    def test_below_first_rung(self):
        assert milestone_status(10) == MilestoneStatus(last_achieved=0, next=25, progress=0.4)

    def test_progress_between_rungs(self):
        assert milestone_status(30).progress == 0.2
        assert milestone_status(25).progress == 0.0

    def test_negative_clamped(self):
        status = milestone_status(-3)
        assert (status.last_achieved, status.next, status.progress) == (0, 25, 0.0)


class TestMotivationalMessage:
    def test_each_range_has_its_own_message(self):
        representatives = [0, 1, 8, 15, 25, 26, 50, 51, 75, 76, 100, 101]
        messages = [motivational_message(d) for d in representatives]
        assert len(set(messages)) == len(representatives)

    @pytest.mark.parametrize(
        ("low", "high"),
        [(1, 7), (8, 14), (15, 24), (26, 49), (51, 74), (76, 99)],
    )
    def test_range_bounds_share_message(self, low, high):
        assert motivational_message(low) == motivational_message(high)

    def test_beyond_hundred(self):
        assert motivational_message(101) == motivational_message(400)
        assert motivational_message(101) != motivational_message(100)

    def test_exact_milestones_are_distinct(self):
        assert motivational_message(25) != motivational_message(24)
        assert motivational_message(25) != motivational_message(26)


class TestJourneyDay:
    def test_no_workout(self):
        assert journey_day(None, date(2026, 2, 25)) == 0

    def test_first_day_is_zero(self):
        assert journey_day(date(2026, 2, 25), date(2026, 2, 25)) == 0

    def test_counts_elapsed_days(self):
        assert journey_day(date(2026, 2, 4), date(2026, 2, 25)) == 21

    def test_future_first_workout_clamped(self):
        assert journey_day(date(2026, 3, 1), date(2026, 2, 25)) == 0
