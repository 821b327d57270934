"""Record accumulation for one search run."""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from nvidia_oc.core.types import Configuration, ProbeResult, Record

logger = logging.getLogger(__name__)


class RecordSink(Protocol):
    """Receives each record as it is produced, in chronological order."""

    def write(self, record: Record) -> None: ...


class Recorder:
    """Append-only record sequence that forwards every record to its sinks.

    Example:
        >>> recorder = Recorder([CsvBackend(path)])
        >>> recorder.record(configuration, probe_result)
        >>> recorder.records[-1]  # most recently accepted
    """

    def __init__(self, sinks: Iterable[RecordSink] = ()) -> None:
        self._sinks = list(sinks)
        self._records: list[Record] = []

    @property
    def records(self) -> tuple[Record, ...]:
        return tuple(self._records)

    @property
    def last(self) -> Record | None:
        return self._records[-1] if self._records else None

    def __len__(self) -> int:
        return len(self._records)

    def record(self, configuration: Configuration, result: ProbeResult) -> Record:
        """Create a record and hand it to every sink immediately."""
        record = Record(configuration=configuration, score=result.score, avg_power=result.avg_power)
        self._records.append(record)
        logger.info(f"  ✓ {record.summary()}")
        for sink in self._sinks:
            sink.write(record)
        return record
