"""Stability-bounded search over power limit and clock offsets.

One macro-iteration runs three phases against the currently accepted
configuration, then relaxes the power limit:

1. power descent: lower the power limit one step at a time
2. core clock phase: walk the core clock offset steps
3. memory clock phase: walk the memory clock offset steps
4. relaxation: give one power step back; stop once it reaches the baseline

Each candidate is applied and probed. An accepted candidate replaces the
current configuration and is recorded; a rejected write or an unstable probe
ends the phase. No configuration is probed twice in a run: one accepted
earlier is stepped over, one that failed earlier ends the phase again.
Instability events share one crash budget for the whole run.
Whatever happens, the device is written back to its baseline configuration
before `run()` returns.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from nvidia_oc.configs.default import SearchSettings
from nvidia_oc.core.errors import ApplyFailure, CrashBudgetExhausted, InstabilityDetected, RestorationFailure
from nvidia_oc.core.types import Baseline, Configuration, Record, SupportedClocks, TerminationReason
from nvidia_oc.device.base import DeviceControl
from nvidia_oc.recording.recorder import Recorder

from .probe import StabilityProbe
from .search import frequency_steps, memory_steps, power_descent

logger = logging.getLogger(__name__)


class SearchController:
    """Runs the search for one device.

    State after `run()`:
        current: last accepted configuration
        crash_cycles: number of instability events
        termination: why the loop stopped
        restored: whether the final rollback write succeeded

    Args:
        device: Device-control capability
        probe: Stability probe
        recorder: Receives accepted records (a fresh in-memory one by default)
        settings: Step size and thresholds
    """

    def __init__(
        self,
        device: DeviceControl,
        probe: StabilityProbe,
        recorder: Optional[Recorder] = None,
        settings: Optional[SearchSettings] = None,
    ) -> None:
        self.device = device
        self.probe = probe
        self.recorder = recorder if recorder is not None else Recorder()
        self.settings = settings or SearchSettings()

        self.current: Optional[Configuration] = None
        self.crash_cycles = 0
        self.termination: Optional[TerminationReason] = None
        self.restored = False
        self._accepted: set[Configuration] = set()
        self._failed: set[Configuration] = set()

    @property
    def records(self) -> tuple[Record, ...]:
        return self.recorder.records

    def run(self, baseline: Baseline, supported_clocks: Optional[SupportedClocks] = None) -> list[Record]:
        """Search from `baseline` and return the accepted records in order.

        Args:
            baseline: Device state captured before the search
            supported_clocks: Clock table (None disables the clock phases)

        Returns:
            Records in chronological order
        """
        origin = baseline.restore_configuration()
        self.current = origin
        self.crash_cycles = 0
        self.termination = None
        self.restored = False
        self._accepted = set()
        self._failed = set()

        skip = 1 if self.settings.skip_first_step else 0
        freq_steps = frequency_steps(supported_clocks, baseline.graphics_clock)[skip:]
        mem_steps = memory_steps(supported_clocks, baseline.memory_clock)[skip:]
        logger.debug(f"Core clock steps: {list(freq_steps)}")
        logger.debug(f"Memory clock steps: {list(mem_steps)}")

        try:
            self.termination = self._search(baseline, freq_steps, mem_steps)
        finally:
            self._restore(origin)

        logger.info(f"Search finished ({self.termination.value}) with {len(self.recorder)} record(s)")
        return list(self.recorder.records)

    # --- Loop ---

    def _search(
        self,
        baseline: Baseline,
        freq_steps: tuple[int, ...],
        mem_steps: tuple[int, ...],
    ) -> TerminationReason:
        step = self.settings.step_power

        try:
            while self.current.power_limit > step:
                self._descend_power()
                self._check_budget()

                self._walk_axis("freq_offset", (baseline.freq_offset + offset for offset in freq_steps))
                self._check_budget()

                self._walk_axis("mem_offset", (baseline.mem_offset + offset for offset in mem_steps))
                self._check_budget()

                relaxed = self.current.power_limit + step
                if relaxed >= baseline.power_limit:
                    return TerminationReason.CONVERGED
                logger.info(f"Relaxing power limit to {relaxed / 1000:.0f}W")
                self.current = self.current.with_(power_limit=relaxed)
        except CrashBudgetExhausted as e:
            logger.warning(f"Stopping search: {e}")
            return TerminationReason.CRASH_BUDGET_EXHAUSTED

        return TerminationReason.POWER_FLOOR

    def _check_budget(self) -> None:
        if self.crash_cycles > self.settings.max_crash_cycles:
            raise CrashBudgetExhausted(f"{self.crash_cycles} unstable configurations")

    # --- Phases ---

    def _descend_power(self) -> None:
        logger.info(f"Lowering power limit from {self.current.power_limit / 1000:.0f}W")
        candidates = (
            self.current.with_(power_limit=limit)
            for limit in power_descent(self.current.power_limit, self.settings.step_power)
        )
        self._run_phase(candidates)

    def _walk_axis(self, field: str, values: Iterable[int]) -> None:
        logger.info(f"Stepping {field.replace('_', ' ')}")
        candidates = (self.current.with_(**{field: value}) for value in values)
        self._run_phase(candidates)

    def _run_phase(self, candidates: Iterable[Configuration]) -> None:
        """Try candidates in order until one fails; candidates are built lazily from `current`.

        Candidates accepted earlier in the run are stepped over without probing;
        one that failed earlier ends the phase as if it had failed again.
        """
        try:
            for candidate in candidates:
                if candidate == self.current or candidate in self._accepted:
                    continue
                if candidate in self._failed:
                    logger.debug(f"  Already failed at {candidate}")
                    return
                self._attempt(candidate)
        except ApplyFailure as e:
            logger.info(f"  ✗ {e}")
        except InstabilityDetected as e:
            logger.warning(f"  ✗ {e} ({self.crash_cycles} instability event(s) so far)")

    def _attempt(self, candidate: Configuration) -> Record:
        """Apply and probe one candidate; adopt and record it on success.

        Raises:
            ApplyFailure: If the device rejected the configuration
            InstabilityDetected: If the probe reported instability
        """
        logger.info(f"  Trying {candidate}")

        if not self.device.apply(candidate):
            self._failed.add(candidate)
            raise ApplyFailure(f"Device rejected {candidate}")

        try:
            result = self.probe(self.device)
        except InstabilityDetected:
            result = None

        if result is None:
            self._failed.add(candidate)
            self.crash_cycles += 1
            raise InstabilityDetected(f"Unstable at {candidate}")

        self._accepted.add(candidate)
        self.current = candidate
        return self.recorder.record(candidate, result)

    # --- Rollback ---

    def _restore(self, origin: Configuration) -> None:
        """Write the baseline configuration back (best effort, never raises)."""
        try:
            if not self.device.apply(origin):
                raise RestorationFailure(f"Device rejected {origin}")
        except Exception as e:
            logger.warning(f"Failed to restore baseline configuration: {e}")
            self.restored = False
        else:
            logger.info(f"Restored baseline configuration ({origin})")
            self.restored = True


def run_search(
    baseline: Baseline,
    supported_clocks: Optional[SupportedClocks],
    probe: StabilityProbe,
    device: DeviceControl,
    recorder: Optional[Recorder] = None,
    settings: Optional[SearchSettings] = None,
) -> list[Record]:
    """Run one search and return the accepted records."""
    controller = SearchController(device, probe, recorder=recorder, settings=settings)
    return controller.run(baseline, supported_clocks)
