"""CSV persistence backend for search records.

Each record is appended and flushed as soon as it is produced, so a run that
is killed mid-way (e.g. because a candidate hung the GPU) keeps every
configuration validated so far.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any

from nvidia_oc.core.types import Record

logger = logging.getLogger(__name__)

CSV_HEADER = (
    "power_limit_w",
    "freq_offset",
    "mem_offset",
    "min_clock",
    "max_clock",
    "score",
    "avg_power_w",
)


def format_row(record: Record) -> str:
    """Canonical CSV row: whole watts, integer-rounded score, power to 2 decimals."""
    return (
        f"{record.power_limit // 1000},{record.freq_offset},{record.mem_offset},"
        f"{record.min_clock},{record.max_clock},{record.score:.0f},{record.avg_power:.2f}"
    )


class CsvBackend:
    """Append-only CSV store.

    A header line is written once, before the first row of a fresh file
    (missing or empty). Existing files are appended to.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the CSV backend.

        Args:
            path: Results file (parent directories are created on first write)
        """
        self.path = Path(path)

    def write(self, record: Record) -> None:
        """Append one record. OS errors are logged, not raised."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fresh = not self.path.exists() or self.path.stat().st_size == 0
            with open(self.path, "a") as f:
                if fresh:
                    f.write(",".join(CSV_HEADER) + "\n")
                f.write(format_row(record) + "\n")
                f.flush()
        except OSError as e:
            logger.warning(f"Failed to save record to {self.path}: {e}")


def load_records(path: str | Path) -> list[dict[str, Any]]:
    """Read a results CSV back into a list of rows.

    Args:
        path: CSV written by CsvBackend

    Returns:
        One dict per row with numeric values (ints for the integer columns,
        floats for score and average power)
    """
    rows = []
    with open(path, newline="") as f:
        for row in csv.DictReader(f):
            parsed: dict[str, Any] = {}
            for name in CSV_HEADER:
                value = row[name]
                parsed[name] = float(value) if name in ("score", "avg_power_w") else int(value)
            rows.append(parsed)
    return rows
