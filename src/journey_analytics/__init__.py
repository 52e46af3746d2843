"""Adherence and progress analytics behind the Hundred Day Journey dashboard."""

from .achievement_cache import AchievementCache, load_achievements
from .calendar_window import build_window
from .engine import JourneyEngine, snapshot_to_dict
from .milestones import MILESTONES, milestone_status, motivational_message
from .models import (
    AchievementState,
    CalendarWindow,
    JourneySnapshot,
    MilestoneStatus,
    WeekBucket,
    WeightSample,
    WorkoutMarker,
)
from .sources import JourneySources
from .streak import calories_goal_met, current_streak
from .weight_trend import weekly_averages

__all__ = [
    "AchievementCache",
    "AchievementState",
    "CalendarWindow",
    "JourneyEngine",
    "JourneySnapshot",
    "JourneySources",
    "MILESTONES",
    "MilestoneStatus",
    "WeekBucket",
    "WeightSample",
    "WorkoutMarker",
    "build_window",
    "calories_goal_met",
    "current_streak",
    "load_achievements",
    "milestone_status",
    "motivational_message",
    "snapshot_to_dict",
    "weekly_averages",
]
