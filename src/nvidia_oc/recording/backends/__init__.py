"""Backend implementations for record persistence.

Each backend handles a specific destination:
- CsvBackend: Append-only results file
- MemoryBackend: In-memory capture
"""

from .disk import CsvBackend
from .memory import MemoryBackend

__all__ = ["CsvBackend", "MemoryBackend"]
