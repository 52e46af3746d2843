"""Value objects shared by the journey analytics components.

All of these are immutable and owned by one computation. Nothing here holds
a reference back to a store or to another aggregate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import ClassVar

DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class WorkoutMarker:
    """A workout session start. Only its local calendar date matters."""

    occurred_at: datetime


@dataclass(frozen=True)
class AchievementState:
    """Which daily nutrition goals were met on one calendar date."""

    calories_achieved: bool = False
    protein_achieved: bool = False
    carbs_achieved: bool = False
    fat_achieved: bool = False

    EMPTY: ClassVar[AchievementState]

    def to_dict(self) -> dict[str, bool]:
        return {
            "calories_achieved": self.calories_achieved,
            "protein_achieved": self.protein_achieved,
            "carbs_achieved": self.carbs_achieved,
            "fat_achieved": self.fat_achieved,
        }


AchievementState.EMPTY = AchievementState()

# date -> state, keyed by local start-of-day date. Replaced wholesale on reload.
AchievementMap = dict[date, AchievementState]


@dataclass(frozen=True)
class WeightSample:
    recorded_at: datetime
    weight_kg: float


@dataclass(frozen=True)
class WeekBucket:
    """Mean body weight over one Monday-to-Sunday span."""

    week_start: date
    average: float
    samples: int

    @property
    def week_end(self) -> date:
        return self.week_start + timedelta(days=DAYS_PER_WEEK - 1)


@dataclass(frozen=True)
class CalendarWindow:
    """Consecutive Monday week starts rendered in the dashboard grid.

    Invariant: entries strictly increase by exactly seven days.
    """

    week_starts: tuple[date, ...]

    def __post_init__(self) -> None:
        if not self.week_starts:
            raise ValueError("CalendarWindow needs at least one week")
        for prev, cur in zip(self.week_starts, self.week_starts[1:]):
            if (cur - prev).days != DAYS_PER_WEEK:
                raise ValueError(
                    f"week starts must be 7 days apart, got {prev.isoformat()} -> {cur.isoformat()}"
                )

    def __len__(self) -> int:
        return len(self.week_starts)

    def __iter__(self):
        return iter(self.week_starts)

    @property
    def first_day(self) -> date:
        return self.week_starts[0]

    @property
    def last_day(self) -> date:
        return self.week_starts[-1] + timedelta(days=DAYS_PER_WEEK - 1)

    def days_of(self, week_start: date) -> list[date]:
        return [week_start + timedelta(days=offset) for offset in range(DAYS_PER_WEEK)]

    def dates(self) -> list[date]:
        """Every calendar date in the window, chronological."""
        return [d for ws in self.week_starts for d in self.days_of(ws)]

    def contains(self, day: date) -> bool:
        return self.first_day <= day <= self.last_day


@dataclass(frozen=True)
class MilestoneStatus:
    last_achieved: int
    next: int
    progress: float = 0.0


@dataclass(frozen=True)
class CalendarDay:
    """One rendered cell of the calendar grid."""

    day: date
    has_workout: bool
    achievement: AchievementState
    is_today: bool
    is_future: bool


@dataclass(frozen=True)
class JourneySnapshot:
    """Fully populated result of one refresh, published as a unit."""

    today: date
    timezone: str
    window: CalendarWindow
    achievements: AchievementMap
    calendar: tuple[tuple[CalendarDay, ...], ...]
    streak: int
    longest_streak: int
    journey_day: int
    milestone: MilestoneStatus
    motivation: str
    weekly_weights: tuple[WeekBucket, ...]
    weight_change_kg: float | None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def weekly_weight_map(self) -> dict[date, float]:
        return {bucket.week_start: bucket.average for bucket in self.weekly_weights}
