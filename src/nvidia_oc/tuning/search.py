"""Candidate generation along the three search axes."""

from typing import Iterator, Optional, Sequence

from nvidia_oc.core.types import SupportedClocks


def candidate_steps(clocks: Sequence[int], baseline_clock: int) -> tuple[int, ...]:
    """Offsets to try on one clock axis.

    Takes every supported clock at or below the baseline clock, sorted
    descending, and expresses it relative to the baseline. The first step is
    the smallest perturbation (0 when the table contains the baseline clock
    itself), later steps restrict the clock further.

    Args:
        clocks: Supported clocks for the axis (MHz, any order)
        baseline_clock: Clock observed when the search started (MHz)

    Returns:
        Non-positive offsets in decreasing order
    """
    below = sorted((clock for clock in clocks if clock <= baseline_clock), reverse=True)
    return tuple(clock - baseline_clock for clock in below)


def frequency_steps(supported: Optional[SupportedClocks], baseline_clock: int) -> tuple[int, ...]:
    """Core clock offsets; empty when the device reports no clock table."""
    if supported is None:
        return ()
    return candidate_steps(supported.graphics, baseline_clock)


def memory_steps(supported: Optional[SupportedClocks], baseline_clock: int) -> tuple[int, ...]:
    """Memory clock offsets; empty when the device reports no clock table."""
    if supported is None:
        return ()
    return candidate_steps(supported.memory, baseline_clock)


def power_descent(limit: int, step: int) -> Iterator[int]:
    """Successively lower power limits, stopping once a limit reaches one step.

    >>> list(power_descent(20_000, 5_000))
    [15000, 10000, 5000]
    """
    while limit > step:
        limit -= step
        yield limit
