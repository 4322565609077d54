from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from mavgtfs.jobs.build.types import RawTimetable, Station, TrainRef


class BaseSource(ABC):
    """Upstream timetable source. Any call may raise or hang; the fetch layer deals with that."""

    @abstractmethod
    async def stations(self) -> list[Station]:
        raise NotImplementedError

    @abstractmethod
    async def departures(self, station: Station, day: datetime) -> list[TrainRef]:
        """Trains leaving `station` on `day`. TrainRef.number is already defaulted to the id."""
        raise NotImplementedError

    @abstractmethod
    async def timetable(self, train_id: str) -> Optional[RawTimetable]:
        """Stop-level timetable for one train, or None if upstream has nothing."""
        raise NotImplementedError

    async def aclose(self) -> None:
        return None
