"""Milestone ladder and motivational copy for the hundred day journey."""

from datetime import date

from .models import MilestoneStatus

MILESTONES: tuple[int, ...] = (25, 50, 75, 100)

# (upper bound inclusive, message). Ranges: 0, 1-7, 8-14, 15-24, 25, 26-49,
# 50, 51-74, 75, 76-99, 100, >100.
_MOTIVATION_TIERS: tuple[tuple[int, str], ...] = (
    (0, "Every journey starts with day one. Log today to begin."),
    (7, "Great start! Keep showing up every day."),
    (14, "Two weeks in. Habits are taking shape."),
    (24, "Almost at your first milestone. Stay consistent!"),
    (25, "25 days! First milestone unlocked."),
    (49, "Building momentum. Halfway point ahead."),
    (50, "Halfway there! 50 days strong."),
    (74, "Past the halfway mark. Keep pushing."),
    (75, "75 days! The finish line is in sight."),
    (99, "The final stretch. Don't stop now."),
    (100, "100 days! Journey complete."),
)
_BEYOND_MESSAGE = "Beyond 100 days. You've made this a lifestyle."


def milestone_status(days: int) -> MilestoneStatus:
    """Last achieved and next upcoming rung for a day count.

    Once the ladder is exhausted ``next`` saturates at the final rung.
    """
    days = max(days, 0)
    last_achieved = max((m for m in MILESTONES if m <= days), default=0)
    next_milestone = min((m for m in MILESTONES if m > days), default=MILESTONES[-1])

    if days >= MILESTONES[-1]:
        progress = 1.0
    else:
        span = next_milestone - last_achieved
        progress = round((days - last_achieved) / span, 3)

    return MilestoneStatus(last_achieved=last_achieved, next=next_milestone, progress=progress)


def motivational_message(days: int) -> str:
    days = max(days, 0)
    for upper, message in _MOTIVATION_TIERS:
        if days <= upper:
            return message
    return _BEYOND_MESSAGE


def journey_day(first_workout_day: date | None, today: date) -> int:
    """Days elapsed since the first recorded workout, counting from 0."""
    if first_workout_day is None:
        return 0
    return max((today - first_workout_day).days, 0)
