import os
from dataclasses import dataclass


@dataclass(frozen=True)
class BuildConfig:
    timezone: str

    concurrency: int
    timeout: float
    attempts: int
    backoff_base: float

    horizon_days: int
    progress_every: int


def load_config() -> BuildConfig:
    return BuildConfig(
        timezone=os.getenv("FEED_TIMEZONE", "Europe/Budapest"),
        concurrency=int(os.getenv("FETCH_CONCURRENCY", "16")),
        timeout=float(os.getenv("FETCH_TIMEOUT_SECONDS", "10")),
        attempts=int(os.getenv("FETCH_ATTEMPTS", "3")),
        backoff_base=float(os.getenv("FETCH_BACKOFF_BASE_SECONDS", "0.5")),
        horizon_days=int(os.getenv("HORIZON_DAYS", "25")),
        progress_every=int(os.getenv("PROGRESS_EVERY", "100")),
    )
