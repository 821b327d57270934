"""Tests for SimulatedDevice."""

from nvidia_oc.core.types import Configuration
from nvidia_oc.device import DeviceControl, SimulatedDevice


def test_satisfies_device_protocol(device):
    assert isinstance(device, DeviceControl)


def test_reports_baseline(device, baseline):
    assert device.power_limit() == baseline.power_limit
    assert device.graphics_clock() == 1_800
    assert device.max_clock() == 2_100
    assert device.supported_clocks() is None


def test_apply_updates_reported_state(device):
    configuration = Configuration(power_limit=120_000, freq_offset=-100, mem_offset=-500)

    assert device.apply(configuration) is True

    assert device.power_limit() == 120_000
    assert device.freq_offset() == -100
    assert device.mem_offset() == -500
    assert device.power_usage() == 120_000
    assert device.last_write == configuration


def test_rejected_write_is_recorded_but_not_applied(baseline):
    device = SimulatedDevice(baseline, reject=lambda c: c.power_limit < 100_000)

    assert device.apply(Configuration(power_limit=90_000)) is False

    assert device.writes == [Configuration(power_limit=90_000)]
    assert device.power_limit() == baseline.power_limit


def test_unreported_values(device):
    device.unreported.add("freq_offset")

    assert device.freq_offset() is None
    assert device.mem_offset() == 0
