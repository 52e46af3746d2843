"""CLI entry point: compute one journey snapshot from the event store."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import replace
from datetime import date
from typing import Sequence

import psycopg

from .config import Config
from .engine import JourneyEngine, snapshot_to_dict
from .logging import setup_logging
from .postgres_sources import (
    PostgresAchievementSource,
    PostgresWeightStore,
    get_retracted_event_ids,
    load_timezone_preference,
    load_workout_markers,
)
from .sources import FixedClock, InMemorySessionStore, JourneySources, SystemClock
from .utils import normalize_timezone_name

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="journey-report",
        description="Print the hundred day journey dashboard snapshot for one user as JSON.",
    )
    parser.add_argument(
        "--user-id",
        required=True,
        help="User UUID whose events should be aggregated.",
    )
    parser.add_argument(
        "--timezone",
        default=None,
        help=(
            "IANA timezone for day boundaries. Defaults to the user's timezone "
            "preference, then JOURNEY_TIMEZONE."
        ),
    )
    parser.add_argument(
        "--weeks",
        default=None,
        type=int,
        help="Calendar window length in weeks (defaults to JOURNEY_WINDOW_WEEKS).",
    )
    parser.add_argument(
        "--today",
        default=None,
        type=date.fromisoformat,
        help="Pin 'today' (YYYY-MM-DD) for replaying a past dashboard.",
    )
    return parser


async def _run(args: argparse.Namespace, config: Config) -> int:
    async with await psycopg.AsyncConnection.connect(config.database_url) as conn:
        timezone_name = normalize_timezone_name(args.timezone) if args.timezone else None
        if args.timezone and timezone_name is None:
            raise ValueError(f"--timezone is not a valid IANA timezone: {args.timezone!r}")
        if timezone_name is None:
            retracted_ids = await get_retracted_event_ids(conn, args.user_id)
            timezone_name = await load_timezone_preference(conn, args.user_id, retracted_ids)
        timezone_name = timezone_name or config.timezone

        clock = (
            FixedClock(args.today, timezone_name)
            if args.today is not None
            else SystemClock(timezone_name)
        )
        markers = await load_workout_markers(conn, args.user_id)
        sources = JourneySources(
            sessions=InMemorySessionStore(markers),
            achievements=PostgresAchievementSource(conn, args.user_id, timezone_name),
            weights=PostgresWeightStore(conn, args.user_id, clock),
            clock=clock,
        )
        engine = JourneyEngine(
            sources,
            window_weeks=config.window_weeks,
            streak_cap=config.streak_cap,
            weight_lookback_days=config.weight_lookback_days,
        )
        snapshot = await engine.refresh()

    if snapshot is None:
        logger.error("Refresh was dropped")
        return 1
    print(json.dumps(snapshot_to_dict(snapshot), indent=2, sort_keys=True))
    return 1 if snapshot.errors else 0


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    config = Config.from_env()
    if args.weeks is not None:
        if args.weeks < 1:
            parser.error("--weeks must be at least 1")
        config = replace(config, window_weeks=args.weeks)
    setup_logging(config.log_format)
    raise SystemExit(asyncio.run(_run(args, config)))


if __name__ == "__main__":
    main()
