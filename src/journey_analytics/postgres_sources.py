"""Event-store backed implementations of the journey collaborators.

All reads go against the append-only ``events`` table. Retracted events
(``event.retracted``) are filtered out of every read, and day boundaries are
taken in the user's timezone.

The achievement source answers a whole window with one meal query plus one
target lookup, however many dates are requested.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Any

import psycopg
from psycopg.rows import dict_row

from .contracts import (
    MACRO_FIELDS,
    BodyweightLoggedData,
    MealLoggedData,
    NutritionTargetData,
    parse_payload,
)
from .logging import journey_extra
from .models import AchievementMap, AchievementState, WeightSample, WorkoutMarker
from .sources import Clock
from .utils import local_date_for_timezone, local_day_bounds, normalize_timezone_name

logger = logging.getLogger(__name__)

WORKOUT_EVENT_TYPES: tuple[str, ...] = ("session.logged", "set.logged")
TIMEZONE_PREFERENCE_KEYS: tuple[str, ...] = ("timezone", "time_zone")
# Older preference events beyond this many are never consulted.
PREFERENCE_SCAN_LIMIT = 64


async def get_retracted_event_ids(
    conn: psycopg.AsyncConnection[Any], user_id: str
) -> set[str]:
    """IDs the user has taken back. Every journey read skips them."""
    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(
            """
            SELECT data->>'retracted_event_id' AS retracted_id
            FROM events
            WHERE user_id = %s
              AND event_type = 'event.retracted'
            """,
            (user_id,),
        )
        retractions = await cur.fetchall()

    retracted: set[str] = set()
    for retraction in retractions:
        if retraction["retracted_id"]:
            retracted.add(retraction["retracted_id"])
    return retracted


async def load_timezone_preference(
    conn: psycopg.AsyncConnection[Any],
    user_id: str,
    retracted_ids: set[str],
) -> str | None:
    """Zone the user asked their journey calendar to use, newest valid first.

    ``None`` when no usable preference exists; callers fall back to config.
    """
    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(
            """
            SELECT id, data
            FROM events
            WHERE user_id = %s
              AND event_type = 'preference.set'
              AND data->>'key' = ANY(%s)
            ORDER BY timestamp DESC, id DESC
            LIMIT %s
            """,
            (user_id, list(TIMEZONE_PREFERENCE_KEYS), PREFERENCE_SCAN_LIMIT),
        )
        candidates = await cur.fetchall()

    live = (row for row in candidates if str(row["id"]) not in retracted_ids)
    for row in live:
        timezone_name = normalize_timezone_name((row.get("data") or {}).get("value"))
        if timezone_name is not None:
            return timezone_name
    return None


async def load_workout_markers(
    conn: psycopg.AsyncConnection[Any], user_id: str
) -> list[WorkoutMarker]:
    """Workout markers for the in-memory session store, oldest first."""
    retracted_ids = await get_retracted_event_ids(conn, user_id)
    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(
            """
            SELECT id, timestamp
            FROM events
            WHERE user_id = %s
              AND event_type = ANY(%s)
            ORDER BY timestamp ASC
            """,
            (user_id, list(WORKOUT_EVENT_TYPES)),
        )
        rows = await cur.fetchall()

    return [
        WorkoutMarker(occurred_at=row["timestamp"])
        for row in rows
        if str(row["id"]) not in retracted_ids
    ]


def achievement_for_day(
    totals: dict[str, float], target: NutritionTargetData | None
) -> AchievementState:
    """A macro is achieved once the day's total reaches its target."""
    if target is None:
        return AchievementState.EMPTY

    def _met(field: str) -> bool:
        goal = getattr(target, field)
        return goal is not None and totals.get(field, 0.0) >= goal

    return AchievementState(
        calories_achieved=_met("calories"),
        protein_achieved=_met("protein_g"),
        carbs_achieved=_met("carbs_g"),
        fat_achieved=_met("fat_g"),
    )


class PostgresAchievementSource:
    """Daily goal achievement derived from meal.logged vs nutrition_target.set."""

    def __init__(
        self,
        conn: psycopg.AsyncConnection[Any],
        user_id: str,
        timezone_name: str,
    ) -> None:
        self._conn = conn
        self.user_id = user_id
        self.timezone_name = timezone_name

    async def _latest_target(self, retracted_ids: set[str]) -> NutritionTargetData | None:
        async with self._conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(
                """
                SELECT id, data
                FROM events
                WHERE user_id = %s
                  AND event_type = 'nutrition_target.set'
                ORDER BY timestamp DESC
                """,
                (self.user_id,),
            )
            target_rows = await cur.fetchall()

        for row in target_rows:
            if str(row["id"]) in retracted_ids:
                continue
            target = parse_payload(NutritionTargetData, row["data"])
            if target is not None:
                return target
            logger.info(
                "Skipping invalid nutrition target %s",
                row["id"],
                extra=journey_extra(user_id=self.user_id, event_id=str(row["id"])),
            )
        return None

    async def fetch_achievements(self, dates: list[date]) -> AchievementMap:
        if not dates:
            return {}
        wanted = set(dates)
        range_start, _ = local_day_bounds(min(wanted), self.timezone_name)
        _, range_end = local_day_bounds(max(wanted), self.timezone_name)

        retracted_ids = await get_retracted_event_ids(self._conn, self.user_id)
        target = await self._latest_target(retracted_ids)

        async with self._conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(
                """
                SELECT id, timestamp, data
                FROM events
                WHERE user_id = %s
                  AND event_type = 'meal.logged'
                  AND timestamp >= %s
                  AND timestamp < %s
                ORDER BY timestamp ASC
                """,
                (self.user_id, range_start, range_end),
            )
            rows = await cur.fetchall()

        day_totals: dict[date, dict[str, float]] = defaultdict(
            lambda: {field: 0.0 for field in MACRO_FIELDS}
        )
        skipped = 0
        for row in rows:
            if str(row["id"]) in retracted_ids:
                continue
            d = local_date_for_timezone(row["timestamp"], self.timezone_name)
            if d not in wanted:
                continue
            meal = parse_payload(MealLoggedData, row["data"])
            if meal is None:
                skipped += 1
                continue
            totals = day_totals[d]
            for field in MACRO_FIELDS:
                totals[field] += getattr(meal, field)

        if skipped:
            logger.info(
                "Skipped %d invalid meal.logged payloads",
                skipped,
                extra=journey_extra(user_id=self.user_id, skipped=skipped),
            )

        # Only days with meals are returned; the cache defaults the rest.
        return {d: achievement_for_day(totals, target) for d, totals in day_totals.items()}


class PostgresWeightStore:
    """Body weight samples from bodyweight.logged events."""

    def __init__(
        self,
        conn: psycopg.AsyncConnection[Any],
        user_id: str,
        clock: Clock,
    ) -> None:
        self._conn = conn
        self.user_id = user_id
        self._clock = clock

    async def fetch_recent_weights(self, days: int) -> list[WeightSample]:
        start_day = self._clock.today() - timedelta(days=days)
        since, _ = local_day_bounds(start_day, self._clock.timezone_name)

        retracted_ids = await get_retracted_event_ids(self._conn, self.user_id)
        async with self._conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(
                """
                SELECT id, timestamp, data
                FROM events
                WHERE user_id = %s
                  AND event_type = 'bodyweight.logged'
                  AND timestamp >= %s
                ORDER BY timestamp ASC
                """,
                (self.user_id, since),
            )
            rows = await cur.fetchall()

        samples: list[WeightSample] = []
        for row in rows:
            if str(row["id"]) in retracted_ids:
                continue
            entry = parse_payload(BodyweightLoggedData, row["data"])
            if entry is None:
                logger.info(
                    "Skipping invalid bodyweight entry %s",
                    row["id"],
                    extra=journey_extra(user_id=self.user_id, event_id=str(row["id"])),
                )
                continue
            ts: datetime = row["timestamp"]
            if ts.tzinfo is None:
                ts = ts.replace(tzinfo=timezone.utc)
            samples.append(WeightSample(recorded_at=ts, weight_kg=entry.weight_kg))
        return samples
