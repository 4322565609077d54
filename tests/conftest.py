from __future__ import annotations

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from mavgtfs.jobs.build.config import BuildConfig
from mavgtfs.jobs.build.sources.base import BaseSource
from mavgtfs.jobs.build.types import RawStop, RawTimetable, Station, TrainRef

BUDAPEST = ZoneInfo("Europe/Budapest")


def at(day: str, hhmm: str) -> datetime:
    """Aware Budapest datetime from 'YYYY-MM-DD' and 'HH:MM'."""
    return datetime.fromisoformat(f"{day}T{hhmm}").replace(tzinfo=BUDAPEST)


def timetable(train_id: str, number: Optional[str], day: str, *stops: tuple[str, str, str]) -> RawTimetable:
    return RawTimetable(
        id=train_id,
        number=number,
        stops=tuple(RawStop(id=s, arrival=at(day, arr), departure=at(day, dep)) for s, arr, dep in stops),
    )


class StubSource(BaseSource):
    """In-memory source. `failing` holds station ids / train ids whose calls always raise."""

    def __init__(
        self,
        stations: list[Station],
        departures: dict[tuple[str, str], list[TrainRef]],
        timetables: dict[str, RawTimetable],
        failing: frozenset[str] = frozenset(),
    ):
        self._stations = stations
        self._departures = departures
        self._timetables = timetables
        self.failing = failing
        self.calls: list[tuple] = []
        self.closed = False

    async def stations(self) -> list[Station]:
        self.calls.append(("stations",))
        return list(self._stations)

    async def departures(self, station: Station, day: datetime) -> list[TrainRef]:
        self.calls.append(("departures", station.id, day.date().isoformat()))
        if station.id in self.failing:
            raise ConnectionError(f"station {station.id} unavailable")
        return list(self._departures.get((station.id, day.date().isoformat()), []))

    async def timetable(self, train_id: str) -> Optional[RawTimetable]:
        self.calls.append(("timetable", train_id))
        if train_id in self.failing:
            raise ConnectionError(f"train {train_id} unavailable")
        return self._timetables.get(train_id)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def cfg() -> BuildConfig:
    return BuildConfig(
        timezone="Europe/Budapest",
        concurrency=16,
        timeout=1.0,
        attempts=3,
        backoff_base=0.0,
        horizon_days=25,
        progress_every=0,
    )


@pytest.fixture
def two_day_source() -> StubSource:
    """Train 100 runs the same pattern on both days (new id each day); 200 only on day one."""
    a = Station(id="A", name="Alpha")
    b = Station(id="B", name="Beta")
    t100a = TrainRef(id="100-a", number="100")
    t100b = TrainRef(id="100-b", number="100")
    t200a = TrainRef(id="200-a", number="200")
    return StubSource(
        stations=[a, b],
        departures={
            ("A", "2026-10-20"): [t100a, t200a],
            ("B", "2026-10-20"): [t100a],
            ("A", "2026-10-21"): [t100b],
            ("B", "2026-10-21"): [t100b],
        },
        timetables={
            "100-a": timetable("100-a", "100", "2026-10-20", ("A", "08:00", "08:00"), ("B", "08:10", "08:10")),
            "100-b": timetable("100-b", "100", "2026-10-21", ("A", "08:00", "08:00"), ("B", "08:10", "08:10")),
            "200-a": timetable("200-a", "200", "2026-10-20", ("A", "09:00", "09:02"), ("B", "09:30", "09:30")),
        },
    )
