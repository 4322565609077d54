from __future__ import annotations

import argparse
from datetime import datetime

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from conftest import BUDAPEST, StubSource
from mavgtfs.jobs.build.run_build import build_parser, main, parse_date
from mavgtfs.models.job_runs import JobRun

NOW = datetime(2026, 10, 19, 10, 0, tzinfo=BUDAPEST)


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'runs.db'}")
    return sessionmaker(bind=engine)


@pytest.fixture(autouse=True)
def _fast_retries(monkeypatch) -> None:
    monkeypatch.setenv("FETCH_BACKOFF_BASE_SECONDS", "0")
    monkeypatch.setenv("FEED_TIMEZONE", "Europe/Budapest")


def test_parse_date() -> None:
    assert parse_date("20.10.2026") == datetime(2026, 10, 20)
    for bad in ("2026-10-20", "1.10.2026", "32.10.2026"):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_date(bad)


def test_parser_rejects_bad_dates(capsys) -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["2026-10-20", "21.10.2026", "out"])
    assert "DD.MM.YYYY" in capsys.readouterr().err


def test_main_writes_feed_and_records_success(tmp_path, two_day_source, session_factory) -> None:
    out = tmp_path / "gtfs"

    code = main(["20.10.2026", "21.10.2026", str(out)], source=two_day_source,
                session_factory=session_factory, now=NOW)

    assert code == 0
    assert sorted(p.name for p in out.iterdir()) == sorted(
        ["agency.txt", "stops.txt", "routes.txt", "trips.txt", "stop_times.txt", "calendar_dates.txt", "feed_info.txt"]
    )
    assert two_day_source.closed

    with session_factory() as db:
        job = db.scalars(select(JobRun)).one()
    assert job.status == "success"
    assert job.job_name == "build_gtfs"
    assert job.meta["files_written"] == 7
    assert job.meta["trips"] == 2
    assert job.meta["args"]["start"] == "2026-10-20"
    assert job.ended_at is not None


def test_main_too_far_ahead_records_failure(tmp_path, two_day_source, session_factory) -> None:
    code = main(["19.10.2026", "18.11.2026", str(tmp_path / "gtfs")], source=two_day_source,
                session_factory=session_factory, now=NOW)

    assert code == 2
    assert two_day_source.calls == []
    assert not (tmp_path / "gtfs").exists()

    with session_factory() as db:
        job = db.scalars(select(JobRun)).one()
    assert job.status == "fail"
    assert "WindowTooFarAhead" in job.meta["error"]
