from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter


class _Wire(BaseModel):
    # upstream ids are sometimes numeric
    model_config = ConfigDict(coerce_numbers_to_str=True)


class CoordinatesIn(_Wire):
    latitude: float
    longitude: float


class StationIn(_Wire):
    id: str
    name: str
    coordinates: Optional[CoordinatesIn] = None


class TrainIn(_Wire):
    id: str
    number: Optional[str] = None


class DepartureIn(_Wire):
    train: TrainIn


class StopIn(_Wire):
    id: str
    arrival: Optional[datetime] = None
    departure: Optional[datetime] = None


class TimetableIn(_Wire):
    id: str
    number: Optional[str] = None
    stops: list[StopIn]


StationList = TypeAdapter(list[StationIn])
DepartureList = TypeAdapter(list[DepartureIn])
