"""Daily goal streaks over a pre-populated achievement map.

The streak walks backward from today one date at a time and stops at the
first date that is missing or fails the goal. The walk never touches I/O;
callers load the map first (see ``achievement_cache``).
"""

from collections.abc import Callable, Mapping
from datetime import date, timedelta

from .models import AchievementState

# Longest reportable streak. The walk stops here even if the run continues.
STREAK_CAP_DAYS = 365

GoalPredicate = Callable[[AchievementState], bool]


def calories_goal_met(state: AchievementState) -> bool:
    """Journey goal: the calorie target was reached. Protein is not considered."""
    return state.calories_achieved


def all_macros_goal_met(state: AchievementState) -> bool:
    """Stricter variant requiring both calories and protein. Not the default."""
    return state.calories_achieved and state.protein_achieved


def current_streak(
    cache: Mapping[date, AchievementState],
    today: date,
    goal_predicate: GoalPredicate = calories_goal_met,
    cap: int = STREAK_CAP_DAYS,
) -> int:
    """Count consecutive goal days ending at ``today``."""
    streak = 0
    cursor = today
    for _ in range(cap):
        state = cache.get(cursor)
        if state is None or not goal_predicate(state):
            break
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(
    cache: Mapping[date, AchievementState],
    goal_predicate: GoalPredicate = calories_goal_met,
) -> int:
    """Longest run of consecutive goal days anywhere in ``cache``."""
    goal_days = sorted(d for d, state in cache.items() if goal_predicate(state))
    longest = 0
    run = 0
    previous: date | None = None
    for d in goal_days:
        if previous is not None and (d - previous).days == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = d
    return longest
