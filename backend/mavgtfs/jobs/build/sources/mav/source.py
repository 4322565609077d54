import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import httpx

from mavgtfs.jobs.build.sources.base import BaseSource
from mavgtfs.jobs.build.types import Coordinates, RawStop, RawTimetable, Station, TrainRef

from .config import MavConfig, load_config
from .http import configure_logging_if_needed, get_json, make_client
from .schemas import DepartureList, StationList, StopIn, TimetableIn

logger = logging.getLogger(__name__)


def _aware(value: Optional[datetime], tz: ZoneInfo) -> Optional[datetime]:
    if value is None:
        return None
    return value if value.tzinfo else value.replace(tzinfo=tz)


def stop_to_raw(stop: StopIn, tz: ZoneInfo) -> RawStop:
    # origin has no arrival, terminus no departure: mirror the side that is there
    arrival = _aware(stop.arrival or stop.departure, tz)
    departure = _aware(stop.departure or stop.arrival, tz)
    return RawStop(id=stop.id, arrival=arrival, departure=departure)


def timetable_to_raw(payload: TimetableIn, tz: ZoneInfo) -> RawTimetable:
    return RawTimetable(
        id=payload.id,
        number=payload.number or None,
        stops=tuple(stop_to_raw(s, tz) for s in payload.stops),
    )


class MavSource(BaseSource):
    """
    JSON timetable API:
      - GET /stations
      - GET /stations/{id}/departures?date=YYYY-MM-DD
      - GET /trains/{id}   (404 = no timetable)
    """

    def __init__(
        self,
        cfg: Optional[MavConfig] = None,
        *,
        timezone: str = "Europe/Budapest",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        configure_logging_if_needed()
        self.cfg = cfg or load_config()
        self.tz = ZoneInfo(timezone)
        self.client = make_client(self.cfg, transport=transport)

        logger.info(
            "MAV source configured base_url=%s timeouts(connect=%.1f read=%.1f write=%.1f pool=%.1f)",
            self.cfg.base_url,
            self.cfg.connect_timeout,
            self.cfg.read_timeout,
            self.cfg.write_timeout,
            self.cfg.pool_timeout,
        )

    async def stations(self) -> list[Station]:
        rows = StationList.validate_python(await get_json(self.client, "/stations"))
        logger.info("Fetched %d stations", len(rows))
        return [
            Station(
                id=s.id,
                name=s.name,
                coordinates=Coordinates(s.coordinates.latitude, s.coordinates.longitude) if s.coordinates else None,
            )
            for s in rows
        ]

    async def departures(self, station: Station, day: datetime) -> list[TrainRef]:
        data = await get_json(
            self.client,
            f"/stations/{station.id}/departures",
            params={"date": day.astimezone(self.tz).date().isoformat()},
        )
        rows = DepartureList.validate_python(data or [])
        return [TrainRef(id=d.train.id, number=d.train.number or d.train.id) for d in rows]

    async def timetable(self, train_id: str) -> Optional[RawTimetable]:
        data = await get_json(self.client, f"/trains/{train_id}", allow_missing=True)
        if not data:
            return None
        return timetable_to_raw(TimetableIn.model_validate(data), self.tz)

    async def aclose(self) -> None:
        await self.client.aclose()
