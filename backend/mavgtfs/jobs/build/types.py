from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Station:
    id: str
    name: str
    coordinates: Optional[Coordinates] = None


@dataclass(frozen=True)
class TrainRef:
    id: str
    number: str                      # falls back to id when upstream has none


@dataclass(frozen=True)
class RawStop:
    id: str
    arrival: Optional[datetime]      # tz-aware
    departure: Optional[datetime]    # tz-aware


@dataclass(frozen=True)
class RawTimetable:
    id: str
    number: Optional[str]
    stops: tuple[RawStop, ...]

    @property
    def display_key(self) -> str:
        return self.number or self.id


@dataclass
class TripGroup:
    key: str
    display_key: str
    index: int
    members: list[RawTimetable] = field(default_factory=list)

    @property
    def trip_id(self) -> str:
        return f"{self.display_key}-{self.index}"


@dataclass(frozen=True)
class Table:
    header: tuple[str, ...]
    rows: tuple[tuple, ...]

    def __len__(self) -> int:
        return len(self.rows)
