import csv
import logging
from pathlib import Path

from .types import Table

logger = logging.getLogger(__name__)


def write_feed(tables: dict[str, Table], directory: Path) -> list[Path]:
    """Write one <name>.txt per table. Tables without data rows are left out entirely."""
    directory.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for name, table in tables.items():
        if not table.rows:
            logger.info("Skipping %s.txt: no rows", name)
            continue
        path = directory / f"{name}.txt"
        with path.open("w", newline="", encoding="utf-8") as fh:
            wr = csv.writer(fh)
            wr.writerow(table.header)
            wr.writerows(table.rows)
        logger.debug("Wrote %s (%d rows)", path, len(table))
        written.append(path)

    logger.info("%d files written to %s", len(written), directory)
    return written
