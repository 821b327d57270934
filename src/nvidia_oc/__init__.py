"""nvidia-oc: NVIDIA GPU power limit and clock offset control.

Sets power limits, clock offsets and locked clock ranges through NVML, and
searches for the lowest stable power limit and clock offsets by validating
every candidate with a benchmark.

Main Programmatic API:
    - tune: Run a full search on a device (baseline, search, restore)
    - SearchController / run_search: The search loop with injected collaborators
    - CsvBackend: Append-only results file

Example:
    >>> from nvidia_oc import CommandProbe, CsvBackend, tune
    >>> from nvidia_oc.device.nvml import NvmlDevice
    >>> with NvmlDevice(index=0) as device:
    ...     result = tune(device, CommandProbe("./bench.sh"), sinks=[CsvBackend("results.csv")])
    >>> print(result)
"""

from nvidia_oc.core.types import Baseline, Configuration, ProbeResult, Record, SupportedClocks, TerminationReason
from nvidia_oc.recording import CsvBackend, MemoryBackend, Recorder
from nvidia_oc.tuning import CommandProbe, ScriptedProbe, SearchController, TuneResult, run_search, tune

__all__ = [
    "tune",
    "TuneResult",
    "SearchController",
    "run_search",
    "CommandProbe",
    "ScriptedProbe",
    "Recorder",
    "CsvBackend",
    "MemoryBackend",
    "Baseline",
    "Configuration",
    "ProbeResult",
    "Record",
    "SupportedClocks",
    "TerminationReason",
]
