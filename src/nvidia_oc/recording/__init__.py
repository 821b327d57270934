"""Record persistence.

Usage:
    recorder = Recorder([CsvBackend(path), MemoryBackend()])
    recorder.record(configuration, probe_result)
"""

from .backends import CsvBackend, MemoryBackend
from .backends.disk import CSV_HEADER, format_row, load_records
from .recorder import Recorder, RecordSink

__all__ = [
    "Recorder",
    "RecordSink",
    "CsvBackend",
    "MemoryBackend",
    "CSV_HEADER",
    "format_row",
    "load_records",
]
