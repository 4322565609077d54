from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from mavgtfs.jobs.build.errors import InvalidRange


def start_of_day(value: datetime, tz: ZoneInfo) -> datetime:
    local = value.astimezone(tz) if value.tzinfo else value.replace(tzinfo=tz)
    return datetime(local.year, local.month, local.day, tzinfo=tz)


def date_range(start: datetime, end: datetime, tz: ZoneInfo) -> list[datetime]:
    """
    Every civil day from start through end (inclusive), as midnight in tz.
    Steps on the calendar rather than by 24h so DST switches do not drift.
    """
    first = start_of_day(start, tz)
    last = start_of_day(end, tz)
    if first > last:
        raise InvalidRange(f"start {first.date()} is after end {last.date()}")

    out: list[datetime] = []
    d = first.date()
    while d <= last.date():
        out.append(datetime(d.year, d.month, d.day, tzinfo=tz))
        d += timedelta(days=1)
    return out


def days_ahead(now: datetime, end: datetime, tz: ZoneInfo) -> int:
    """Number of calendar days from today through end, inclusive; 0 if end is in the past."""
    delta = (start_of_day(end, tz).date() - start_of_day(now, tz).date()).days
    return max(delta + 1, 0)


def hhmmss(value: datetime, tz: ZoneInfo) -> str:
    return value.astimezone(tz).strftime("%H:%M:%S")


def yyyymmdd(value: datetime, tz: ZoneInfo) -> str:
    return value.astimezone(tz).strftime("%Y%m%d")
