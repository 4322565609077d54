import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from .errors import TransformError
from .types import RawTimetable, Station, Table, TrainRef, TripGroup
from .utils.time import hhmmss, yyyymmdd
from .utils.trip_key import make_trip_key

logger = logging.getLogger(__name__)

AGENCY_ID = "máv"

TABLE_ORDER = ("agency", "stops", "routes", "trips", "stop_times", "calendar_dates", "feed_info")

HEADERS: dict[str, tuple[str, ...]] = {
    "agency": (
        "agency_id", "agency_name", "agency_url", "agency_timezone",
        "agency_lang", "agency_phone", "agency_fare_url", "agency_email",
    ),
    "stops": (
        "stop_id", "stop_code", "stop_name", "stop_desc", "stop_lat", "stop_lon",
        "zone_id", "stop_url", "location_type", "parent_station", "stop_timezone", "wheelchair_boarding",
    ),
    "routes": (
        "route_id", "agency_id", "route_short_name", "route_long_name",
        "route_desc", "route_type", "route_url", "route_color", "route_text_color",
    ),
    "trips": (
        "route_id", "service_id", "trip_id", "trip_headsign", "trip_short_name",
        "direction_id", "block_id", "shape_id", "wheelchair_accessible", "bikes_allowed",
    ),
    "stop_times": (
        "trip_id", "arrival_time", "departure_time", "stop_id", "stop_sequence",
        "stop_headsign", "pickup_type", "drop_off_type", "shape_dist_traveled", "timepoint",
    ),
    "calendar_dates": ("service_id", "date", "exception_type"),
    "feed_info": (
        "feed_publisher_name", "feed_publisher_url", "feed_lang",
        "feed_start_date", "feed_end_date", "feed_version",
    ),
}

ROUTE_TYPE_RAIL = 2
EXCEPTION_ADDED = 1


def _sort_key(item: tuple[str, RawTimetable]) -> tuple[str, datetime, str]:
    _, t = item
    return t.display_key, t.stops[0].departure, t.id


def group_timetables(timetables: list[RawTimetable]) -> tuple[list[TripGroup], int]:
    """
    Group timetables that share a trip key. Input order does not matter: timetables are
    sorted by (display key, first departure, id) first, so group indices are reproducible.
    Returns the groups and the number of timetables skipped as malformed.
    """
    keyed: list[tuple[str, RawTimetable]] = []
    skipped = 0
    for t in timetables:
        try:
            keyed.append((make_trip_key(t), t))
        except TransformError as e:
            skipped += 1
            logger.warning("Skipping timetable %s: %s", t.id, e)

    groups: dict[str, TripGroup] = {}
    for key, t in sorted(keyed, key=_sort_key):
        group = groups.get(key)
        if group is None:
            group = groups[key] = TripGroup(key=key, display_key=t.display_key, index=len(groups))
        group.members.append(t)

    logger.info("Grouped %d timetables into %d trips (skipped=%d)", len(keyed), len(groups), skipped)
    return list(groups.values()), skipped


def to_gtfs(groups: list[TripGroup], tz: ZoneInfo) -> dict[str, Table]:
    trips: list[tuple] = []
    stop_times: list[tuple] = []
    calendar_dates: list[tuple] = []

    for group in groups:
        trip_id = group.trip_id
        trips.append((group.display_key, trip_id, trip_id, "", "", "", "", "", "", ""))

        first = group.members[0]
        for seq, stop in enumerate(first.stops):
            stop_times.append(
                (trip_id, hhmmss(stop.arrival, tz), hhmmss(stop.departure, tz), stop.id, seq, "", "", "", "", "")
            )

        for member in group.members:
            calendar_dates.append((trip_id, yyyymmdd(member.stops[0].departure, tz), EXCEPTION_ADDED))

    return {
        "trips": Table(HEADERS["trips"], tuple(trips)),
        "stop_times": Table(HEADERS["stop_times"], tuple(stop_times)),
        "calendar_dates": Table(HEADERS["calendar_dates"], tuple(calendar_dates)),
    }


def unique_routes(trains: list[TrainRef]) -> list[str]:
    seen: dict[str, None] = {}
    for t in trains:
        seen.setdefault(t.number, None)
    return list(seen)


def static_tables(
    stations: list[Station],
    trains: list[TrainRef],
    start: datetime,
    end: datetime,
    tz: ZoneInfo,
) -> dict[str, Table]:
    agency = [
        (AGENCY_ID, "Magyar Államvasutak", "https://www.mavcsoport.hu/", str(tz.key), "hu",
         "+3613494949", "https://www.mavcsoport.hu/", "informacio@mav-start.hu"),
    ]
    stops = [
        (
            s.id, "", s.name, "",
            s.coordinates.latitude if s.coordinates else "",
            s.coordinates.longitude if s.coordinates else "",
            "", "", 0, "", "", "",
        )
        for s in stations
    ]
    routes = [(n, AGENCY_ID, n, n, "", ROUTE_TYPE_RAIL, "", "", "") for n in unique_routes(trains)]
    feed_info = [
        ("gtfs.directory", "https://gtfs.directory", "en", yyyymmdd(start, tz), yyyymmdd(end, tz), ""),
    ]
    return {
        "agency": Table(HEADERS["agency"], tuple(agency)),
        "stops": Table(HEADERS["stops"], tuple(stops)),
        "routes": Table(HEADERS["routes"], tuple(routes)),
        "feed_info": Table(HEADERS["feed_info"], tuple(feed_info)),
    }


def assemble_feed(static: dict[str, Table], scheduled: dict[str, Table]) -> dict[str, Table]:
    merged = {**static, **scheduled}
    return {name: merged[name] for name in TABLE_ORDER}
