import pytest

from nvidia_oc.core.types import Baseline, SupportedClocks
from nvidia_oc.device.simulated import SimulatedDevice


@pytest.fixture
def baseline() -> Baseline:
    return Baseline(
        power_limit=150_000,
        freq_offset=0,
        mem_offset=0,
        graphics_clock=1_800,
        memory_clock=7_000,
        max_clock=2_100,
    )


@pytest.fixture
def clocks() -> SupportedClocks:
    return SupportedClocks(
        graphics=(1_600, 1_700, 1_800, 1_900),
        memory=(5_000, 6_000, 7_000, 8_000),
    )


@pytest.fixture
def device(baseline) -> SimulatedDevice:
    return SimulatedDevice(baseline)
