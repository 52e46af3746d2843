"""Hundred Day Journey analytics engine.

One refresh cycle:

1. Resolve today and the workout days from the injected sources.
2. Finalize the calendar window. It is cached and only rebuilt when the
   earliest workout changes (or, with no workouts, when the current week moves).
3. Run the bulk achievement load and the weight load concurrently.
4. Derive streaks, milestone status, calendar cells and weekly weights.
5. Publish the complete snapshot in one assignment.

A refresh requested while another one is in flight is dropped; the in-flight
refresh wins. Collaborator failures never escape: they are recorded on the
snapshot and the affected aggregates fall back to empty defaults.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date, timedelta
from typing import Any

from .achievement_cache import AchievementCache, ErrorObserver, notify_error
from .calendar_window import DEFAULT_WINDOW_WEEKS, window_for_anchor, workout_days
from .logging import journey_extra
from .metrics import record_refresh
from .milestones import journey_day, milestone_status, motivational_message
from .models import (
    AchievementMap,
    AchievementState,
    CalendarDay,
    CalendarWindow,
    JourneySnapshot,
    WeightSample,
)
from .sources import JourneySources
from .streak import STREAK_CAP_DAYS, GoalPredicate, calories_goal_met, current_streak, longest_streak
from .utils import daterange, week_start
from .weight_trend import DEFAULT_LOOKBACK_DAYS, WeightTrendLoader, weekly_buckets, weight_change

logger = logging.getLogger(__name__)


class JourneyEngine:
    """Computes journey snapshots from a capability set of sources."""

    def __init__(
        self,
        sources: JourneySources,
        *,
        window_weeks: int = DEFAULT_WINDOW_WEEKS,
        streak_cap: int = STREAK_CAP_DAYS,
        weight_lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        goal_predicate: GoalPredicate = calories_goal_met,
        on_error: ErrorObserver | None = None,
    ) -> None:
        if window_weeks < 1:
            raise ValueError("window_weeks must be at least 1")
        self.sources = sources
        self.window_weeks = window_weeks
        self.streak_cap = streak_cap
        self.goal_predicate = goal_predicate
        self._on_error = on_error

        self._errors: dict[str, str] = {}
        self.achievements = AchievementCache(sources.achievements, on_error=self._observe_error)
        self.weights = WeightTrendLoader(
            sources.weights,
            lookback_days=weight_lookback_days,
            on_error=self._observe_error,
        )

        self._refreshing = False
        self._window: CalendarWindow | None = None
        self._window_anchor: date | None = None
        self._window_built_for_week: date | None = None
        self._snapshot: JourneySnapshot | None = None

    @property
    def snapshot(self) -> JourneySnapshot | None:
        """Latest complete snapshot, or ``None`` before the first refresh."""
        return self._snapshot

    @property
    def window(self) -> CalendarWindow | None:
        return self._window

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    def _observe_error(self, source_name: str, exc: BaseException) -> None:
        self._errors[source_name] = str(exc) or type(exc).__name__
        notify_error(self._on_error, source_name, exc)

    def _resolve_window(self, anchor: date | None, today: date) -> CalendarWindow:
        current_week = week_start(today)
        cached = self._window
        if cached is not None and anchor == self._window_anchor:
            if anchor is not None or current_week == self._window_built_for_week:
                return cached

        window = window_for_anchor(anchor, today, self.window_weeks)
        self._window = window
        self._window_anchor = anchor
        self._window_built_for_week = current_week
        logger.debug(
            "Calendar window rebuilt: %s .. %s",
            window.first_day.isoformat(),
            window.last_day.isoformat(),
            extra=journey_extra(anchor=anchor.isoformat() if anchor else None),
        )
        return window

    def _achievement_dates(self, window: CalendarWindow, today: date) -> set[date]:
        """Window dates plus the streak lookback, so the walk never runs off the map."""
        lookback = daterange(today - timedelta(days=self.streak_cap - 1), self.streak_cap)
        return set(window.dates()) | set(lookback)

    async def refresh(self) -> JourneySnapshot | None:
        """Run one refresh cycle. Returns ``None`` if one was already in flight."""
        if self._refreshing:
            record_refresh(0.0, dropped=True)
            logger.debug("Refresh already in flight; dropping request")
            return None

        self._refreshing = True
        self._errors = {}
        started = time.monotonic()
        try:
            clock = self.sources.clock
            today = clock.today()
            timezone_name = clock.timezone_name

            markers = self.sources.list_workout_sessions()
            days_with_workout = workout_days(markers, timezone_name)
            anchor = min(days_with_workout) if days_with_workout else None
            window = self._resolve_window(anchor, today)

            async with asyncio.TaskGroup() as tg:
                achievements_task = tg.create_task(
                    self.achievements.load(self._achievement_dates(window, today))
                )
                weights_task = tg.create_task(self.weights.load())

            achievements = achievements_task.result()
            if achievements is None:
                achievements = self.achievements.snapshot
            samples = weights_task.result()
            if samples is None:
                samples = self.weights.samples

            snapshot = self._build_snapshot(
                today=today,
                timezone_name=timezone_name,
                window=window,
                achievements=achievements,
                days_with_workout=days_with_workout,
                first_workout_day=anchor,
                samples=samples,
            )
            self._snapshot = snapshot

            duration_ms = (time.monotonic() - started) * 1000
            record_refresh(duration_ms)
            logger.info(
                "Journey refreshed: streak=%d milestone=%d->%d weeks_with_weight=%d",
                snapshot.streak,
                snapshot.milestone.last_achieved,
                snapshot.milestone.next,
                len(snapshot.weekly_weights),
                extra=journey_extra(
                    duration_ms=round(duration_ms, 1),
                    streak=snapshot.streak,
                    errors=sorted(snapshot.errors),
                ),
            )
            return snapshot
        finally:
            self._refreshing = False

    def _build_snapshot(
        self,
        *,
        today: date,
        timezone_name: str,
        window: CalendarWindow,
        achievements: AchievementMap,
        days_with_workout: set[date],
        first_workout_day: date | None,
        samples: list[WeightSample],
    ) -> JourneySnapshot:
        streak = current_streak(achievements, today, self.goal_predicate, cap=self.streak_cap)
        buckets = weekly_buckets(samples, window.week_starts, timezone_name)

        calendar = tuple(
            tuple(
                CalendarDay(
                    day=d,
                    has_workout=d in days_with_workout,
                    achievement=achievements.get(d, AchievementState.EMPTY),
                    is_today=d == today,
                    is_future=d > today,
                )
                for d in window.days_of(ws)
            )
            for ws in window.week_starts
        )

        return JourneySnapshot(
            today=today,
            timezone=timezone_name,
            window=window,
            achievements=dict(achievements),
            calendar=calendar,
            streak=streak,
            longest_streak=longest_streak(achievements, self.goal_predicate),
            journey_day=journey_day(first_workout_day, today),
            milestone=milestone_status(streak),
            motivation=motivational_message(streak),
            weekly_weights=tuple(buckets),
            weight_change_kg=weight_change(buckets),
            errors=dict(self._errors),
        )


def snapshot_to_dict(snapshot: JourneySnapshot) -> dict[str, Any]:
    """JSON-ready rendering of a snapshot (calendar window dates only)."""
    return {
        "today": snapshot.today.isoformat(),
        "timezone": snapshot.timezone,
        "window": [ws.isoformat() for ws in snapshot.window.week_starts],
        "calendar": [
            [
                {
                    "date": cell.day.isoformat(),
                    "has_workout": cell.has_workout,
                    "is_today": cell.is_today,
                    "is_future": cell.is_future,
                    **cell.achievement.to_dict(),
                }
                for cell in week
            ]
            for week in snapshot.calendar
        ],
        "streak": snapshot.streak,
        "longest_streak": snapshot.longest_streak,
        "journey_day": snapshot.journey_day,
        "milestone": {
            "last_achieved": snapshot.milestone.last_achieved,
            "next": snapshot.milestone.next,
            "progress": snapshot.milestone.progress,
        },
        "motivation": snapshot.motivation,
        "weekly_weights": [
            {
                "week_start": bucket.week_start.isoformat(),
                "avg_weight_kg": round(bucket.average, 2),
                "measurements": bucket.samples,
            }
            for bucket in snapshot.weekly_weights
        ],
        "weight_change_kg": snapshot.weight_change_kg,
        "errors": dict(snapshot.errors),
    }
