import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from .collector import fetch_timetables
from .config import BuildConfig
from .discovery import fetch_trains
from .errors import InvalidRange, WindowTooFarAhead
from .feed import assemble_feed, group_timetables, static_tables, to_gtfs
from .fetcher import BoundedFetcher
from .sources.base import BaseSource
from .types import Table
from .utils.time import date_range, days_ahead, start_of_day

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    tables: dict[str, Table]
    stats: dict = field(default_factory=dict)


def validate_window(start: datetime, end: datetime, cfg: BuildConfig, now: datetime) -> None:
    tz = ZoneInfo(cfg.timezone)
    if start_of_day(start, tz) > start_of_day(end, tz):
        raise InvalidRange(f"`end` ({end:%d.%m.%Y}) is before `start` ({start:%d.%m.%Y})")

    ahead = days_ahead(now, end, tz)
    if ahead > cfg.horizon_days:
        raise WindowTooFarAhead(
            f"GTFS can only be generated max. {cfg.horizon_days} days in advance "
            f"(end {end:%d.%m.%Y} is {ahead} days out)"
        )


async def build_feed(
    source: BaseSource,
    start: datetime,
    end: datetime,
    cfg: BuildConfig,
    *,
    now: Optional[datetime] = None,
) -> BuildResult:
    """Discovery -> collection -> grouping -> tables. Only window validation can fail the run."""
    tz = ZoneInfo(cfg.timezone)
    validate_window(start, end, cfg, now or datetime.now(tz))

    dates = date_range(start, end, tz)
    stations = await source.stations()
    logger.info("Building feed %s..%s: %d days x %d stations",
                f"{dates[0]:%Y-%m-%d}", f"{dates[-1]:%Y-%m-%d}", len(dates), len(stations))

    trains, discovery = await fetch_trains(
        source, dates, stations, BoundedFetcher.from_config(cfg, name="departures")
    )
    timetables, collection = await fetch_timetables(
        source, trains, BoundedFetcher.from_config(cfg, name="timetables")
    )

    groups, skipped = group_timetables(timetables)
    tables = assemble_feed(
        static_tables(stations, trains, start_of_day(start, tz), start_of_day(end, tz), tz),
        to_gtfs(groups, tz),
    )

    stats = {
        "dates": len(dates),
        "stations": len(stations),
        "trains": len(trains),
        "departures_dropped": discovery.dropped,
        "timetables": len(timetables),
        "timetables_dropped": collection.dropped,
        "timetables_skipped": skipped,
        "trips": len(groups),
    }
    logger.info("Feed built: %s", stats)
    return BuildResult(tables=tables, stats=stats)
