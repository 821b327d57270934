"""In-memory record capture backend."""

from __future__ import annotations

from nvidia_oc.core.types import Record


class MemoryBackend:
    """Backend for capturing records in memory."""

    def __init__(self) -> None:
        self.records: list[Record] = []

    def write(self, record: Record) -> None:
        self.records.append(record)
