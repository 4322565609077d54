from mavgtfs.jobs.build.errors import TransformError
from mavgtfs.jobs.build.types import RawStop, RawTimetable

STOP_SEP = "_-_"
KEY_SEP = "#@#"


def _check(component: str, timetable_id: str) -> str:
    if STOP_SEP in component or KEY_SEP in component:
        raise TransformError(f"timetable {timetable_id}: {component!r} contains a key separator")
    return component


def normalize_stop(stop: RawStop, timetable_id: str = "?") -> tuple[int, int]:
    """
    (arrival, departure) in seconds relative to the stop's own arrival.
    Keeps the dwell time at each stop; inter-stop running times are not part of the pattern.
    """
    if stop.arrival is None or stop.departure is None:
        raise TransformError(f"timetable {timetable_id}: stop {stop.id} is missing arrival/departure")
    rel_arr = int((stop.arrival - stop.arrival).total_seconds())
    rel_dep = int((stop.departure - stop.arrival).total_seconds())
    return rel_arr, rel_dep


def make_trip_key(timetable: RawTimetable) -> str:
    if not timetable.stops:
        raise TransformError(f"timetable {timetable.id} has no stops")

    parts = [_check(timetable.display_key, timetable.id)]
    for stop in timetable.stops:
        rel_arr, rel_dep = normalize_stop(stop, timetable.id)
        parts.append(STOP_SEP.join([_check(stop.id, timetable.id), str(rel_arr), str(rel_dep)]))
    return KEY_SEP.join(parts)
