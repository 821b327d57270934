"""Tests for NvmlDevice against a fake NVML binding."""

import pytest

from nvidia_oc.configs.default import DeviceSettings
from nvidia_oc.core.errors import DeviceError
from nvidia_oc.core.types import Configuration
from nvidia_oc.device import nvml as nvml_module
from nvidia_oc.device.nvml import NvmlDevice


class FakeNVMLError(Exception):
    pass


class FakeNvml:
    """Stand-in for the pynvml module with one GPU."""

    NVMLError = FakeNVMLError
    NVML_CLOCK_GRAPHICS = 0
    NVML_CLOCK_MEM = 2

    def __init__(self):
        self.calls = []
        self.failing = set()
        self.initialized = False

    def _call(self, name, *args):
        self.calls.append((name, *args))
        if name in self.failing:
            raise FakeNVMLError(f"{name} not supported")

    def nvmlInit(self):
        self.initialized = True

    def nvmlShutdown(self):
        self.initialized = False

    def nvmlDeviceGetCount(self):
        return 1

    def nvmlDeviceGetHandleByIndex(self, index):
        return f"gpu{index}"

    def nvmlDeviceGetEnforcedPowerLimit(self, handle):
        self._call("power_limit", handle)
        return 150_000

    def nvmlDeviceGetGpcClkVfOffset(self, handle):
        self._call("freq_offset", handle)
        return 100

    def nvmlDeviceGetMemClkVfOffset(self, handle):
        self._call("mem_offset", handle)
        return 500

    def nvmlDeviceGetClockInfo(self, handle, kind):
        self._call("clock", handle, kind)
        return 1_800 if kind == self.NVML_CLOCK_GRAPHICS else 7_000

    def nvmlDeviceGetMaxClockInfo(self, handle, kind):
        self._call("max_clock", handle, kind)
        return 2_100

    def nvmlDeviceGetPowerUsage(self, handle):
        self._call("power_usage", handle)
        return 142_500

    def nvmlDeviceSetPowerManagementLimit(self, handle, value):
        self._call("set_power_limit", handle, value)

    def nvmlDeviceSetGpcClkVfOffset(self, handle, value):
        self._call("set_freq_offset", handle, value)

    def nvmlDeviceSetMemClkVfOffset(self, handle, value):
        self._call("set_mem_offset", handle, value)

    def nvmlDeviceSetGpuLockedClocks(self, handle, low, high):
        self._call("set_clocks", handle, low, high)

    def nvmlDeviceSetMemoryLockedClocks(self, handle, low, high):
        self._call("set_mem_clocks", handle, low, high)


@pytest.fixture
def fake_nvml(monkeypatch):
    fake = FakeNvml()
    monkeypatch.setattr(nvml_module, "pynvml", fake)
    return fake


@pytest.fixture
def gpu(fake_nvml):
    with NvmlDevice(index=0) as device:
        yield device


class TestLifecycle:
    """Tests for open/close."""

    def test_context_manager(self, fake_nvml):
        with NvmlDevice(index=0) as device:
            assert fake_nvml.initialized
            assert device.handle == "gpu0"

        assert not fake_nvml.initialized

    def test_invalid_index(self, fake_nvml):
        with pytest.raises(DeviceError, match="GPU index 3 not found"):
            NvmlDevice(index=3).open()

        assert not fake_nvml.initialized

    def test_handle_requires_open(self, fake_nvml):
        with pytest.raises(DeviceError, match="not initialized"):
            NvmlDevice().handle

    def test_init_failure(self, fake_nvml, monkeypatch):
        def broken_init():
            raise FakeNVMLError("driver not loaded")

        monkeypatch.setattr(fake_nvml, "nvmlInit", broken_init)

        with pytest.raises(DeviceError, match="Failed to initialize NVML"):
            NvmlDevice().open()


class TestQueries:
    """Tests for the read side."""

    def test_reports_values(self, gpu):
        assert gpu.power_limit() == 150_000
        assert gpu.freq_offset() == 100
        assert gpu.mem_offset() == 500
        assert gpu.graphics_clock() == 1_800
        assert gpu.memory_clock() == 7_000
        assert gpu.max_clock() == 2_100
        assert gpu.power_usage() == 142_500

    def test_unsupported_query_is_none(self, gpu, fake_nvml):
        """A query NVML cannot answer is "not reported", not an error."""
        fake_nvml.failing.add("freq_offset")

        assert gpu.freq_offset() is None
        assert gpu.power_limit() == 150_000


class TestWrites:
    """Tests for apply and apply_settings."""

    def test_apply_writes_every_field(self, gpu, fake_nvml):
        configuration = Configuration(power_limit=120_000, freq_offset=-100, mem_offset=-1_000, max_clock=2_100)

        assert gpu.apply(configuration) is True

        assert fake_nvml.calls == [
            ("set_power_limit", "gpu0", 120_000),
            ("set_freq_offset", "gpu0", -100),
            ("set_mem_offset", "gpu0", -1_000),
            ("set_clocks", "gpu0", 0, 2_100),
        ]

    def test_apply_failure_returns_false(self, gpu, fake_nvml):
        fake_nvml.failing.add("set_mem_offset")

        assert gpu.apply(Configuration(power_limit=120_000)) is False

    def test_apply_settings_writes_only_given_fields(self, gpu, fake_nvml):
        settings = DeviceSettings(freq_offset=150, power_limit=200_000)

        gpu.apply_settings(settings)

        assert fake_nvml.calls == [
            ("set_freq_offset", "gpu0", 150),
            ("set_power_limit", "gpu0", 200_000),
        ]

    def test_apply_settings_clock_ranges(self, gpu, fake_nvml):
        settings = DeviceSettings(min_clock=210, max_clock=1_800, min_mem_clock=405, max_mem_clock=7_000)

        gpu.apply_settings(settings)

        assert fake_nvml.calls == [
            ("set_clocks", "gpu0", 210, 1_800),
            ("set_mem_clocks", "gpu0", 405, 7_000),
        ]

    def test_apply_settings_failure(self, gpu, fake_nvml):
        """The first rejected write raises and later writes are not attempted."""
        fake_nvml.failing.add("set_mem_offset")
        settings = DeviceSettings(freq_offset=150, mem_offset=1_000, power_limit=200_000)

        with pytest.raises(DeviceError, match="Failed to set GPU memory frequency offset"):
            gpu.apply_settings(settings)

        assert [call[0] for call in fake_nvml.calls] == ["set_freq_offset", "set_mem_offset"]
