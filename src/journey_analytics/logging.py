"""Structured logging for the journey analytics engine.

Controlled via JOURNEY_LOG_FORMAT env var: "json" (default) or "text".
Fields passed through ``journey_extra()`` land as top-level keys of the JSON
line, e.g. ``{"journey_source": "achievements", "journey_dates": 84}``.
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

EXTRA_PREFIX = "journey_"


def journey_extra(**fields: Any) -> dict[str, Any]:
    """Build a logging ``extra`` dict with every key namespaced under journey_."""
    return {
        key if key.startswith(EXTRA_PREFIX) else f"{EXTRA_PREFIX}{key}": value
        for key, value in fields.items()
    }


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = "".join(traceback.format_exception(*record.exc_info))

        for key, value in record.__dict__.items():
            if key.startswith(EXTRA_PREFIX):
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(log_format: str, level: int | str = logging.INFO) -> None:
    """Route every journey log line to stderr, as JSON or as plain text.

    Only the journey-report entry point calls this; the engine never
    touches handler configuration.
    """
    level = _resolve_level(level)
    formatter = JSONFormatter() if log_format == "json" else logging.Formatter(TEXT_FORMAT)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(stderr_handler)
