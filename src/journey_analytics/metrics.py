"""In-memory analytics metrics.

Asyncio is single-threaded, so plain dicts are safe without locking.
"""

import time

_start_time = time.monotonic()


def _fresh_metrics() -> dict:
    return {
        "refreshes_completed": 0,
        "refreshes_dropped": 0,
        "total_refresh_ms": 0.0,
        "sources": {},
    }


_metrics: dict = _fresh_metrics()


def record_fetch(source: str, duration_ms: float, success: bool) -> None:
    """Record a single collaborator fetch with timing."""
    s = _metrics["sources"].setdefault(source, {
        "fetches": 0,
        "successes": 0,
        "failures": 0,
        "total_duration_ms": 0.0,
    })
    s["fetches"] += 1
    s["total_duration_ms"] += duration_ms
    if success:
        s["successes"] += 1
    else:
        s["failures"] += 1


def record_refresh(duration_ms: float, dropped: bool = False) -> None:
    if dropped:
        _metrics["refreshes_dropped"] += 1
        return
    _metrics["refreshes_completed"] += 1
    _metrics["total_refresh_ms"] += duration_ms


def get_metrics() -> dict:
    """Return a snapshot of current metrics."""
    return {
        "uptime_seconds": round(time.monotonic() - _start_time, 1),
        "refreshes_completed": _metrics["refreshes_completed"],
        "refreshes_dropped": _metrics["refreshes_dropped"],
        "total_refresh_ms": round(_metrics["total_refresh_ms"], 1),
        "sources": {
            name: dict(stats)
            for name, stats in _metrics["sources"].items()
        },
    }


def reset_metrics() -> None:
    global _metrics
    _metrics = _fresh_metrics()
