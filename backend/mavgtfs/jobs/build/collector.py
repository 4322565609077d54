import logging
from typing import Optional

from .fetcher import BatchResult, BoundedFetcher
from .sources.base import BaseSource
from .types import RawTimetable, TrainRef

logger = logging.getLogger(__name__)


async def fetch_timetables(
    source: BaseSource,
    trains: list[TrainRef],
    fetcher: BoundedFetcher,
) -> tuple[list[RawTimetable], BatchResult]:

    async def timetable(train: TrainRef) -> Optional[RawTimetable]:
        return await source.timetable(train.id)

    result = await fetcher.run(trains, timetable, describe=lambda t: f"train {t.id} ({t.number})")

    timetables = [t for t in result.successes if t is not None]
    empty = len(result.successes) - len(timetables)
    logger.info(
        "Collected %d timetables for %d trains (empty=%d dropped=%d)",
        len(timetables),
        len(trains),
        empty,
        result.dropped,
    )
    return timetables, result
