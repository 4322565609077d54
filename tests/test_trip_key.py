from __future__ import annotations

import pytest

from conftest import at, timetable
from mavgtfs.jobs.build.errors import TransformError
from mavgtfs.jobs.build.types import RawStop, RawTimetable
from mavgtfs.jobs.build.utils.trip_key import KEY_SEP, make_trip_key, normalize_stop


def test_same_pattern_on_different_days_shares_key() -> None:
    day1 = timetable("100-a", "100", "2026-10-20", ("A", "08:00", "08:00"), ("B", "08:10", "08:12"))
    day2 = timetable("100-b", "100", "2026-10-27", ("A", "08:00", "08:00"), ("B", "08:10", "08:12"))
    assert make_trip_key(day1) == make_trip_key(day2)


def test_key_layout() -> None:
    t = timetable("100-a", "100", "2026-10-20", ("A", "08:00", "08:00"), ("B", "08:10", "08:12"))
    assert make_trip_key(t) == KEY_SEP.join(["100", "A_-_0_-_0", "B_-_0_-_120"])


def test_dwell_change_changes_key() -> None:
    base = timetable("1", "100", "2026-10-20", ("A", "08:00", "08:00"), ("B", "08:10", "08:12"))
    longer = timetable("1", "100", "2026-10-20", ("A", "08:00", "08:00"), ("B", "08:10", "08:13"))
    assert make_trip_key(base) != make_trip_key(longer)


def test_offsets_are_relative_to_each_stop_own_arrival() -> None:
    # running time between stops is not part of the pattern, only dwell is
    fast = timetable("1", "100", "2026-10-20", ("A", "08:00", "08:01"), ("B", "08:10", "08:10"))
    slow = timetable("2", "100", "2026-10-20", ("A", "08:00", "08:01"), ("B", "08:40", "08:40"))
    assert make_trip_key(fast) == make_trip_key(slow)
    assert normalize_stop(fast.stops[0]) == (0, 60)


def test_display_key_falls_back_to_id() -> None:
    t = timetable("X99", None, "2026-10-20", ("A", "08:00", "08:00"))
    assert make_trip_key(t).startswith("X99" + KEY_SEP)


def test_different_stop_sequence_changes_key() -> None:
    ab = timetable("1", "100", "2026-10-20", ("A", "08:00", "08:00"), ("B", "08:10", "08:10"))
    ac = timetable("1", "100", "2026-10-20", ("A", "08:00", "08:00"), ("C", "08:10", "08:10"))
    assert make_trip_key(ab) != make_trip_key(ac)


def test_missing_arrival_raises() -> None:
    t = RawTimetable(id="1", number="100", stops=(RawStop(id="A", arrival=None, departure=at("2026-10-20", "08:00")),))
    with pytest.raises(TransformError, match="stop A"):
        make_trip_key(t)


def test_no_stops_raises() -> None:
    with pytest.raises(TransformError):
        make_trip_key(RawTimetable(id="1", number="100", stops=()))


def test_separator_in_stop_id_raises() -> None:
    t = timetable("1", "100", "2026-10-20", ("A#@#B", "08:00", "08:00"))
    with pytest.raises(TransformError):
        make_trip_key(t)
