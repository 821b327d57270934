"""Main API functions for autotuning a GPU."""

import logging
import time
from dataclasses import dataclass
from typing import Iterable, Optional

from nvidia_oc.configs.default import SearchSettings
from nvidia_oc.core.types import Baseline, Record, TerminationReason
from nvidia_oc.device.base import DeviceControl
from nvidia_oc.recording.recorder import Recorder, RecordSink

from .controller import SearchController
from .probe import StabilityProbe

logger = logging.getLogger(__name__)


@dataclass
class TuneResult:
    """Result of one autotuning run."""

    records: list[Record]
    baseline: Baseline
    crash_cycles: int
    termination: TerminationReason
    restored: bool
    elapsed_s: float

    @property
    def best(self) -> Optional[Record]:
        """Highest-scoring record (earliest wins ties)."""
        if not self.records:
            return None
        return max(self.records, key=lambda record: record.score)

    def __repr__(self):
        best = self.best
        return (
            f"TuneResult(\n"
            f"  records={len(self.records)},\n"
            f"  best={best.summary() if best else None},\n"
            f"  crash_cycles={self.crash_cycles},\n"
            f"  termination={self.termination.value},\n"
            f"  restored={self.restored}\n"
            f")"
        )


def capture_baseline(device: DeviceControl) -> Baseline:
    """Read the device's current configuration.

    Values the device does not report become 0.
    """

    def read(value: Optional[int]) -> int:
        return value if value is not None else 0

    return Baseline(
        power_limit=read(device.power_limit()),
        freq_offset=read(device.freq_offset()),
        mem_offset=read(device.mem_offset()),
        graphics_clock=read(device.graphics_clock()),
        memory_clock=read(device.memory_clock()),
        max_clock=read(device.max_clock()),
    )


def tune(
    device: DeviceControl,
    probe: StabilityProbe,
    sinks: Iterable[RecordSink] = (),
    settings: Optional[SearchSettings] = None,
    verbose: bool = True,
) -> TuneResult:
    """Search for the lowest stable power limit and clock offsets.

    This function will:
    1. Capture the device's baseline configuration
    2. Query the supported clock table
    3. Run the power / core clock / memory clock search
    4. Restore the baseline configuration

    Every accepted configuration is written to `sinks` as soon as it is
    validated.

    Args:
        device: Device to tune (exclusively owned for the duration of the run)
        probe: Stability probe (typically a CommandProbe)
        sinks: Record sinks (e.g. CsvBackend)
        settings: Search settings
        verbose: Control log output verbosity

    Returns:
        TuneResult with all records and the run outcome
    """
    # Set up logging level based on verbose flag
    previous_level = logger.level
    if not verbose:
        logger.setLevel(logging.WARNING)

    try:
        return _run_tune(device, probe, sinks, settings or SearchSettings())
    finally:
        logger.setLevel(previous_level)


def _run_tune(
    device: DeviceControl,
    probe: StabilityProbe,
    sinks: Iterable[RecordSink],
    settings: SearchSettings,
) -> TuneResult:
    start_time = time.time()

    baseline = capture_baseline(device)
    supported = device.supported_clocks()

    logger.info("")
    logger.info("Searching for stable power and clock settings...")
    logger.info("=" * 70)
    logger.info(f"Power limit: {baseline.power_limit / 1000:.0f}W (step {settings.step_power / 1000:.0f}W)")
    logger.info(f"Core clock: {baseline.graphics_clock} MHz (offset {baseline.freq_offset:+d} MHz)")
    logger.info(f"Memory clock: {baseline.memory_clock} MHz (offset {baseline.mem_offset:+d} MHz)")
    logger.info(f"Max core clock: {baseline.max_clock} MHz")
    if not supported:
        logger.info("Supported clocks: unavailable (power limit only)")
    logger.info("")

    controller = SearchController(device, probe, recorder=Recorder(sinks), settings=settings)
    records = controller.run(baseline, supported)

    result = TuneResult(
        records=records,
        baseline=baseline,
        crash_cycles=controller.crash_cycles,
        termination=controller.termination,
        restored=controller.restored,
        elapsed_s=time.time() - start_time,
    )

    logger.info("")
    logger.info("=" * 70)
    if records:
        logger.info(f"Last result - {records[-1].summary()}")
        logger.info(f"Best result - {result.best.summary()}")
    else:
        logger.info("No stable configuration found below the baseline.")
    logger.info(f"Instability events: {result.crash_cycles}")
    if not result.restored:
        logger.warning("Baseline configuration could not be restored; check the device settings.")
    logger.info(f"Search took {result.elapsed_s:.1f}s")
    logger.info("=" * 70)

    return result
