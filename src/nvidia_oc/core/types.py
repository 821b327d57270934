"""Value types shared by the search, the device layer and the record sinks.

All tunable state is modelled as frozen pydantic models. A search step never
edits a Configuration field by field; it builds a new one with `with_()` and
swaps it in, so the currently accepted state is always a single value.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, NonNegativeInt, field_validator


class Configuration(BaseModel):
    """Tunable state of one device at one point in time."""

    model_config = ConfigDict(frozen=True)

    power_limit: NonNegativeInt  # milliwatts
    freq_offset: int = 0  # MHz, relative to nominal core clock
    mem_offset: int = 0  # MHz, relative to nominal memory clock
    min_clock: NonNegativeInt = 0  # MHz, locked clock range
    max_clock: NonNegativeInt = 0

    def with_(self, **changes) -> "Configuration":
        """Return a copy with the given fields replaced."""
        return self.model_copy(update=changes)

    def __str__(self) -> str:
        return (
            f"{self.power_limit / 1000:.0f}W, core {self.freq_offset:+d} MHz, "
            f"mem {self.mem_offset:+d} MHz, clocks {self.min_clock}-{self.max_clock} MHz"
        )


class Baseline(BaseModel):
    """Device state captured once when a search starts.

    Every field defaults to 0 because devices are allowed not to report some
    of them; the search treats a missing value as neutral.
    """

    model_config = ConfigDict(frozen=True)

    power_limit: NonNegativeInt = 0
    freq_offset: int = 0
    mem_offset: int = 0
    graphics_clock: NonNegativeInt = 0  # observed current clocks (MHz)
    memory_clock: NonNegativeInt = 0
    max_clock: NonNegativeInt = 0  # maximum graphics clock (MHz)

    def restore_configuration(self) -> Configuration:
        """Configuration that puts the device back the way it was found.

        The locked clock range is reset to [0, max graphics clock].
        """
        return Configuration(
            power_limit=self.power_limit,
            freq_offset=self.freq_offset,
            mem_offset=self.mem_offset,
            min_clock=0,
            max_clock=self.max_clock,
        )


class SupportedClocks(BaseModel):
    """Clock table reported by the device, ascending and de-duplicated."""

    model_config = ConfigDict(frozen=True)

    graphics: tuple[NonNegativeInt, ...] = ()
    memory: tuple[NonNegativeInt, ...] = ()

    @field_validator("graphics", "memory")
    @classmethod
    def sort_ascending(cls, clocks: tuple[int, ...]) -> tuple[int, ...]:
        return tuple(sorted(set(clocks)))

    def __bool__(self) -> bool:
        return bool(self.graphics or self.memory)


class ProbeResult(BaseModel):
    """Successful stability probe outcome."""

    model_config = ConfigDict(frozen=True)

    score: float  # higher is better
    avg_power: float  # watts


class Record(BaseModel):
    """One validated configuration and the probe result that validated it."""

    model_config = ConfigDict(frozen=True)

    configuration: Configuration
    score: float
    avg_power: float

    @property
    def power_limit(self) -> int:
        return self.configuration.power_limit

    @property
    def freq_offset(self) -> int:
        return self.configuration.freq_offset

    @property
    def mem_offset(self) -> int:
        return self.configuration.mem_offset

    @property
    def min_clock(self) -> int:
        return self.configuration.min_clock

    @property
    def max_clock(self) -> int:
        return self.configuration.max_clock

    def summary(self) -> str:
        """One-line summary in the format of the results view."""
        return (
            f"PL: {self.power_limit // 1000}W, Freq: {self.freq_offset} MHz, Mem: {self.mem_offset} MHz, "
            f"Clocks: {self.min_clock}-{self.max_clock} MHz, Score: {self.score:.0f}, "
            f"Avg Power: {self.avg_power:.2f}W"
        )


class TerminationReason(str, Enum):
    """Why the search loop stopped."""

    CONVERGED = "converged"  # relaxed power limit reached the baseline
    CRASH_BUDGET_EXHAUSTED = "crash_budget_exhausted"
    POWER_FLOOR = "power_floor"  # power limit at or below one step
