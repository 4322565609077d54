import logging
from datetime import datetime
from typing import Iterable

from .fetcher import BatchResult, BoundedFetcher
from .sources.base import BaseSource
from .types import Station, TrainRef

logger = logging.getLogger(__name__)


def unique_trains(batches: Iterable[list[TrainRef]]) -> list[TrainRef]:
    """Union of the per-task lists, deduplicated by id; the first occurrence wins."""
    seen: set[str] = set()
    out: list[TrainRef] = []
    for trains in batches:
        for t in trains:
            if t.id in seen:
                continue
            seen.add(t.id)
            out.append(t)
    return out


async def fetch_trains(
    source: BaseSource,
    dates: list[datetime],
    stations: list[Station],
    fetcher: BoundedFetcher,
) -> tuple[list[TrainRef], BatchResult]:
    tasks = [(day, station) for day in dates for station in stations]

    async def departures(task: tuple[datetime, Station]) -> list[TrainRef]:
        day, station = task
        rows = await source.departures(station, day)
        return [TrainRef(id=t.id, number=t.number or t.id) for t in rows or []]

    result = await fetcher.run(
        tasks,
        departures,
        describe=lambda task: f"departures {task[1].id} {task[1].name} {task[0]:%d.%m.%Y}",
    )

    # successes come back in submission order, which keeps the dedup reproducible
    trains = unique_trains(result.successes)
    logger.info(
        "Discovered %d unique trains from %d (date, station) pairs (dropped=%d)",
        len(trains),
        len(tasks),
        result.dropped,
    )
    return trains, result
