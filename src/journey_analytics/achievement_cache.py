"""Bulk-loaded date -> achievement map for the journey calendar.

One call to the achievement source covers the whole window, instead of a
lookup per day from the streak walk. The cache is total over the requested
dates: anything the source leaves out is filled with ``AchievementState.EMPTY``,
and a failed fetch degrades to an all-empty map rather than raising.

At most one bulk load runs per cache instance. A load requested while one is
in flight is dropped and the in-flight load wins.
"""

import logging
import time
from collections.abc import Callable, Iterable
from datetime import date

from .logging import journey_extra
from .metrics import record_fetch
from .models import AchievementMap, AchievementState
from .sources import AchievementSource

logger = logging.getLogger(__name__)

SOURCE_NAME = "achievements"

# Called with (source_name, exception) when a fetch fails.
ErrorObserver = Callable[[str, BaseException], None]


def fill_missing(requested: Iterable[date], fetched: AchievementMap) -> AchievementMap:
    """Restrict ``fetched`` to exactly the requested dates, defaulting gaps.

    Entries that are not an ``AchievementState`` (e.g. ``None``) count as gaps.
    """
    result: AchievementMap = {}
    for d in requested:
        state = fetched.get(d)
        result[d] = state if isinstance(state, AchievementState) else AchievementState.EMPTY
    return result


def empty_achievements(requested: Iterable[date]) -> AchievementMap:
    return {d: AchievementState.EMPTY for d in requested}


def notify_error(
    on_error: ErrorObserver | None, source_name: str, exc: BaseException
) -> None:
    """Hand a fetch failure to the observer. A failing observer is logged, not raised."""
    if on_error is None:
        return
    try:
        on_error(source_name, exc)
    except Exception:
        logger.exception(
            "Error observer failed for source=%s",
            source_name,
            extra=journey_extra(source=source_name),
        )


async def load_achievements(
    source: AchievementSource,
    dates: Iterable[date],
    on_error: ErrorObserver | None = None,
) -> AchievementMap:
    """Fetch achievements for ``dates`` in a single round trip.

    Never raises for source failures; the error goes to ``on_error`` instead.
    """
    requested = sorted(set(dates))
    if not requested:
        return {}

    started = time.monotonic()
    try:
        fetched = await source.fetch_achievements(requested)
    except Exception as exc:
        duration_ms = (time.monotonic() - started) * 1000
        record_fetch(SOURCE_NAME, duration_ms, success=False)
        logger.warning(
            "Achievement fetch failed for %d dates: %s",
            len(requested),
            exc,
            extra=journey_extra(source=SOURCE_NAME, dates=len(requested), duration_ms=round(duration_ms, 1)),
        )
        notify_error(on_error, SOURCE_NAME, exc)
        return empty_achievements(requested)

    duration_ms = (time.monotonic() - started) * 1000
    record_fetch(SOURCE_NAME, duration_ms, success=True)

    fetched = fetched or {}
    result = fill_missing(requested, fetched)
    filled = sum(1 for d in requested if not isinstance(fetched.get(d), AchievementState))
    logger.debug(
        "Loaded achievements for %d dates (%d defaulted)",
        len(requested),
        filled,
        extra=journey_extra(source=SOURCE_NAME, dates=len(requested), defaulted=filled),
    )
    return result


class AchievementCache:
    """Owns the current achievement snapshot for one consumer."""

    def __init__(
        self,
        source: AchievementSource,
        on_error: ErrorObserver | None = None,
    ) -> None:
        self._source = source
        self._on_error = on_error
        self._loading = False
        self._snapshot: AchievementMap = {}
        self.last_error: BaseException | None = None

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def snapshot(self) -> AchievementMap:
        """Latest complete map. Never a partially written one."""
        return self._snapshot

    def get(self, day: date) -> AchievementState:
        return self._snapshot.get(day, AchievementState.EMPTY)

    def _record_error(self, source_name: str, exc: BaseException) -> None:
        self.last_error = exc
        notify_error(self._on_error, source_name, exc)

    async def load(self, dates: Iterable[date]) -> AchievementMap | None:
        """Replace the snapshot with a fresh bulk load.

        Returns the new map, or ``None`` if another load was already in flight.
        """
        if self._loading:
            logger.debug(
                "Achievement load already in flight; dropping request",
                extra=journey_extra(source=SOURCE_NAME),
            )
            return None

        self._loading = True
        self.last_error = None
        try:
            result = await load_achievements(self._source, dates, on_error=self._record_error)
            self._snapshot = result
            return result
        finally:
            self._loading = False
