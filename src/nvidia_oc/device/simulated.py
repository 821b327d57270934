"""In-memory device used for tests and dry runs."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from nvidia_oc.core.types import Baseline, Configuration, SupportedClocks

logger = logging.getLogger(__name__)


class SimulatedDevice:
    """Device double that records every write.

    Reported values come from `baseline`; a successful `apply` updates the
    reported power limit and offsets the way a real device would.

    Args:
        baseline: Values reported by the queries (None fields are "not reported")
        supported: Clock table to report (None means unsupported)
        reject: Predicate; `apply` returns False for configurations it accepts
        power_draw_mw: Value returned by `power_usage()`
    """

    def __init__(
        self,
        baseline: Optional[Baseline] = None,
        supported: Optional[SupportedClocks] = None,
        reject: Optional[Callable[[Configuration], bool]] = None,
        power_draw_mw: Optional[int] = None,
    ) -> None:
        baseline = baseline or Baseline()
        self._state = {
            "power_limit": baseline.power_limit,
            "freq_offset": baseline.freq_offset,
            "mem_offset": baseline.mem_offset,
            "graphics_clock": baseline.graphics_clock,
            "memory_clock": baseline.memory_clock,
            "max_clock": baseline.max_clock,
        }
        self._supported = supported
        self._reject = reject
        self._power_draw_mw = power_draw_mw
        self.writes: list[Configuration] = []
        self.unreported: set[str] = set()

    @property
    def last_write(self) -> Optional[Configuration]:
        return self.writes[-1] if self.writes else None

    def apply(self, configuration: Configuration) -> bool:
        self.writes.append(configuration)
        if self._reject is not None and self._reject(configuration):
            logger.debug(f"Simulated device rejected {configuration}")
            return False
        self._state["power_limit"] = configuration.power_limit
        self._state["freq_offset"] = configuration.freq_offset
        self._state["mem_offset"] = configuration.mem_offset
        return True

    def _read(self, name: str) -> Optional[int]:
        if name in self.unreported:
            return None
        return self._state[name]

    def power_limit(self) -> Optional[int]:
        return self._read("power_limit")

    def freq_offset(self) -> Optional[int]:
        return self._read("freq_offset")

    def mem_offset(self) -> Optional[int]:
        return self._read("mem_offset")

    def graphics_clock(self) -> Optional[int]:
        return self._read("graphics_clock")

    def memory_clock(self) -> Optional[int]:
        return self._read("memory_clock")

    def max_clock(self) -> Optional[int]:
        return self._read("max_clock")

    def supported_clocks(self) -> Optional[SupportedClocks]:
        return self._supported

    def power_usage(self) -> Optional[int]:
        if self._power_draw_mw is not None:
            return self._power_draw_mw
        return self._state["power_limit"]
