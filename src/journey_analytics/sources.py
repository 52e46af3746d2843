"""Collaborator interfaces consumed by the analytics engine.

The engine never reaches for a global store. Callers hand it a
``JourneySources`` capability set; production wires Postgres-backed
implementations (see ``postgres_sources``), tests wire fakes.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Protocol, runtime_checkable
from zoneinfo import ZoneInfo

from .models import AchievementMap, WeightSample, WorkoutMarker
from .utils import DEFAULT_ASSUMED_TIMEZONE


@runtime_checkable
class SessionStore(Protocol):
    """Workout sessions already loaded into memory by the host app."""

    def list_workout_sessions(self) -> list[WorkoutMarker]:
        ...


@runtime_checkable
class AchievementSource(Protocol):
    async def fetch_achievements(self, dates: list[date]) -> AchievementMap:
        ...


@runtime_checkable
class WeightStore(Protocol):
    async def fetch_recent_weights(self, days: int) -> list[WeightSample]:
        ...


@runtime_checkable
class Clock(Protocol):
    timezone_name: str

    def today(self) -> date:
        ...


class SystemClock:
    """Wall clock projected into an IANA timezone."""

    def __init__(self, timezone_name: str = DEFAULT_ASSUMED_TIMEZONE) -> None:
        self.timezone_name = timezone_name
        self._tz = ZoneInfo(timezone_name)

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone(self._tz)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to one date, for replays and tests."""

    def __init__(self, day: date, timezone_name: str = DEFAULT_ASSUMED_TIMEZONE) -> None:
        self.timezone_name = timezone_name
        self._day = day

    def today(self) -> date:
        return self._day

    def advance(self, days: int = 1) -> None:
        self._day = date.fromordinal(self._day.toordinal() + days)


class InMemorySessionStore:
    def __init__(self, markers: Iterable[WorkoutMarker] = ()) -> None:
        self._markers = list(markers)

    def list_workout_sessions(self) -> list[WorkoutMarker]:
        return list(self._markers)

    def add(self, marker: WorkoutMarker) -> None:
        self._markers.append(marker)


@dataclass(frozen=True)
class JourneySources:
    """Capability set: everything the engine may read from the outside world."""

    sessions: SessionStore
    achievements: AchievementSource
    weights: WeightStore
    clock: Clock

    def list_workout_sessions(self) -> list[WorkoutMarker]:
        return self.sessions.list_workout_sessions()

    async def fetch_achievements(self, dates: list[date]) -> AchievementMap:
        return await self.achievements.fetch_achievements(dates)

    async def fetch_recent_weights(self, days: int) -> list[WeightSample]:
        return await self.weights.fetch_recent_weights(days)

    def today(self) -> date:
        return self.clock.today()
