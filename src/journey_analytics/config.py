import os
from dataclasses import dataclass

from .utils import normalize_timezone_name


@dataclass(frozen=True)
class Config:
    database_url: str
    timezone: str = "UTC"
    window_weeks: int = 12
    streak_cap: int = 365
    weight_lookback_days: int = 90
    log_format: str = "json"

    @classmethod
    def from_env(cls) -> "Config":
        database_url = os.environ.get("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL must be set")

        raw_timezone = os.environ.get("JOURNEY_TIMEZONE", "UTC")
        timezone_name = normalize_timezone_name(raw_timezone)
        if timezone_name is None:
            raise ValueError(f"JOURNEY_TIMEZONE is not a valid IANA timezone: {raw_timezone!r}")

        window_weeks = int(os.environ.get("JOURNEY_WINDOW_WEEKS", "12"))
        if window_weeks < 1:
            raise ValueError("JOURNEY_WINDOW_WEEKS must be at least 1")

        return cls(
            database_url=database_url,
            timezone=timezone_name,
            window_weeks=window_weeks,
            streak_cap=int(os.environ.get("JOURNEY_STREAK_CAP", "365")),
            weight_lookback_days=int(os.environ.get("JOURNEY_WEIGHT_LOOKBACK_DAYS", "90")),
            log_format=os.environ.get("JOURNEY_LOG_FORMAT", "json"),
        )
