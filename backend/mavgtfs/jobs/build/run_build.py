import argparse
import asyncio
import logging
import uuid
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy.orm import Session

from mavgtfs.core.db import Base, SessionLocal
from mavgtfs.models.job_runs import JobRun
from mavgtfs.jobs.build.config import BuildConfig, load_config
from mavgtfs.jobs.build.errors import FeedBuildError
from mavgtfs.jobs.build.pipeline import build_feed
from mavgtfs.jobs.build.sources.base import BaseSource
from mavgtfs.jobs.build.sources.mav.http import configure_logging_if_needed
from mavgtfs.jobs.build.sources.mav.source import MavSource
from mavgtfs.jobs.build.writer import write_feed

logger = logging.getLogger(__name__)

JOB_NAME = "build_gtfs"


def parse_date(value: str) -> datetime:
    v = value.strip()
    try:
        if len(v) != 10:
            raise ValueError(v)
        return datetime.strptime(v, "%d.%m.%Y")
    except ValueError:
        raise argparse.ArgumentTypeError(f"Date must look like DD.MM.YYYY. Got: {value}")


def _version() -> str:
    try:
        return version("mav-gtfs")
    except PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mav-gtfs", description="Build a GTFS feed for MÁV trains in a date range")
    p.add_argument("start", type=parse_date, help="Feed start date: DD.MM.YYYY")
    p.add_argument("end", type=parse_date, help="Feed end date: DD.MM.YYYY (included)")
    p.add_argument("directory", help="Directory where the generated GTFS will be placed")
    p.add_argument("--version", "-v", action="version", version=f"%(prog)s {_version()}")
    return p


async def run(
    source: BaseSource,
    start: datetime,
    end: datetime,
    directory: Path,
    cfg: BuildConfig,
    *,
    now: Optional[datetime] = None,
) -> dict:
    try:
        result = await build_feed(source, start, end, cfg, now=now)
    finally:
        await source.aclose()

    written = write_feed(result.tables, directory)
    return {**result.stats, "files_written": len(written), "files": [p.name for p in written]}


def finish_job(db: Session, run_id: uuid.UUID, status: str, extra: dict) -> None:
    job = db.get(JobRun, run_id)
    job.status = status
    job.ended_at = datetime.now(timezone.utc)
    job.meta = {**(job.meta or {}), **extra}
    db.commit()


def main(
    argv: Optional[list[str]] = None,
    *,
    source: Optional[BaseSource] = None,
    session_factory: Callable[[], Session] = SessionLocal,
    now: Optional[datetime] = None,
) -> int:
    args = build_parser().parse_args(argv)
    configure_logging_if_needed()
    cfg = load_config()

    db = session_factory()
    Base.metadata.create_all(db.get_bind())
    run_id = uuid.uuid4()

    db.add(
        JobRun(
            run_id=run_id,
            job_name=JOB_NAME,
            window_start=args.start.date(),
            window_end=args.end.date(),
            status="running",
            meta={"args": {"start": args.start.date().isoformat(), "end": args.end.date().isoformat(),
                           "directory": args.directory}},
        )
    )
    db.commit()

    try:
        result = asyncio.run(
            run(
                source or MavSource(timezone=cfg.timezone),
                args.start,
                args.end,
                Path(args.directory).resolve(),
                cfg,
                now=now,
            )
        )
        finish_job(db, run_id, "success", result)
        logger.info("%d files written (run_id=%s)", result["files_written"], run_id)
        return 0

    except FeedBuildError as e:
        db.rollback()
        finish_job(db, run_id, "fail", {"error": repr(e)})
        logger.error("%s", e)
        return 2

    except Exception as e:
        db.rollback()
        finish_job(db, run_id, "fail", {"error": repr(e)})
        raise

    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
