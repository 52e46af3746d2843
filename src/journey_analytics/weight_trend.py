"""Weekly body-weight rollups for the journey weight trend.

Each requested week start defines a Monday-to-Sunday bucket on local calendar
dates. Non-empty buckets report the arithmetic mean of their samples; empty
buckets are omitted, never zero-filled. Everything is recomputed from scratch
on every call.
"""

import logging
import time
from collections import defaultdict
from collections.abc import Iterable
from datetime import date, timedelta

from .achievement_cache import ErrorObserver, notify_error
from .logging import journey_extra
from .metrics import record_fetch
from .models import DAYS_PER_WEEK, WeekBucket, WeightSample
from .sources import WeightStore
from .utils import DEFAULT_ASSUMED_TIMEZONE, local_date_for_timezone

logger = logging.getLogger(__name__)

SOURCE_NAME = "weights"
DEFAULT_LOOKBACK_DAYS = 90


def weekly_buckets(
    samples: Iterable[WeightSample],
    weeks: Iterable[date],
    timezone_name: str = DEFAULT_ASSUMED_TIMEZONE,
) -> list[WeekBucket]:
    """Average samples into the given week buckets, chronological."""
    week_starts = sorted(set(weeks))
    if not week_starts:
        return []

    by_day: dict[date, list[float]] = defaultdict(list)
    for sample in samples:
        by_day[local_date_for_timezone(sample.recorded_at, timezone_name)].append(
            float(sample.weight_kg)
        )

    buckets: list[WeekBucket] = []
    for ws in week_starts:
        end = ws + timedelta(days=DAYS_PER_WEEK - 1)
        selected = [w for d, values in by_day.items() if ws <= d <= end for w in values]
        if not selected:
            continue
        buckets.append(WeekBucket(
            week_start=ws,
            average=sum(selected) / len(selected),
            samples=len(selected),
        ))
    return buckets


def weekly_averages(
    samples: Iterable[WeightSample],
    weeks: Iterable[date],
    timezone_name: str = DEFAULT_ASSUMED_TIMEZONE,
) -> dict[date, float]:
    """Map week start -> mean weight, omitting weeks without samples."""
    return {
        bucket.week_start: bucket.average
        for bucket in weekly_buckets(samples, weeks, timezone_name)
    }


def weight_change(buckets: list[WeekBucket]) -> float | None:
    """Latest bucket average minus earliest, to 0.1 kg."""
    if len(buckets) < 2:
        return None
    ordered = sorted(buckets, key=lambda b: b.week_start)
    return round(ordered[-1].average - ordered[0].average, 1)


class WeightTrendLoader:
    """Fetches recent samples with a single in-flight load at a time.

    A failed fetch yields no samples; the error goes to the observer.
    """

    def __init__(
        self,
        store: WeightStore,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        on_error: ErrorObserver | None = None,
    ) -> None:
        self._store = store
        self.lookback_days = lookback_days
        self._on_error = on_error
        self._loading = False
        self._samples: list[WeightSample] = []
        self.last_error: BaseException | None = None

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def samples(self) -> list[WeightSample]:
        return self._samples

    async def load(self) -> list[WeightSample] | None:
        """Returns fresh samples, or ``None`` if a load was already in flight."""
        if self._loading:
            logger.debug(
                "Weight load already in flight; dropping request",
                extra=journey_extra(source=SOURCE_NAME),
            )
            return None

        self._loading = True
        self.last_error = None
        started = time.monotonic()
        try:
            try:
                samples = list(await self._store.fetch_recent_weights(self.lookback_days))
            except Exception as exc:
                duration_ms = (time.monotonic() - started) * 1000
                record_fetch(SOURCE_NAME, duration_ms, success=False)
                logger.warning(
                    "Weight fetch failed (lookback=%d days): %s",
                    self.lookback_days,
                    exc,
                    extra=journey_extra(source=SOURCE_NAME, duration_ms=round(duration_ms, 1)),
                )
                self.last_error = exc
                notify_error(self._on_error, SOURCE_NAME, exc)
                samples = []
            else:
                record_fetch(SOURCE_NAME, (time.monotonic() - started) * 1000, success=True)
            self._samples = samples
            return samples
        finally:
            self._loading = False
