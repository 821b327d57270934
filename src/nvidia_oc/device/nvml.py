"""NVML-backed device control.

Wraps nvidia-ml-py (`pynvml`). Writes require root privileges; see
`nvidia_oc.utils.privileges.escalate_permissions`.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

import pynvml

from nvidia_oc.configs.default import DeviceSettings
from nvidia_oc.core.errors import DeviceError
from nvidia_oc.core.types import Configuration, SupportedClocks

from .clocks import query_supported_clocks

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NvmlDevice:
    """Controller for one NVIDIA GPU through NVML.

    Usage:
        with NvmlDevice(index=0) as device:
            device.apply(configuration)
    """

    def __init__(self, index: int = 0) -> None:
        self.index = index
        self._handle = None
        self._initialized = False

    def __enter__(self) -> "NvmlDevice":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def open(self) -> None:
        """Initialize NVML and look up the device handle.

        Raises:
            DeviceError: If NVML cannot be initialized or the index is invalid
        """
        try:
            pynvml.nvmlInit()
            self._initialized = True
            count = pynvml.nvmlDeviceGetCount()
            if self.index >= count:
                raise DeviceError(f"GPU index {self.index} not found. Available GPUs: {count}")
            self._handle = pynvml.nvmlDeviceGetHandleByIndex(self.index)
        except pynvml.NVMLError as e:
            self.close()
            raise DeviceError(f"Failed to initialize NVML: {e}") from e
        except DeviceError:
            self.close()
            raise

        logger.debug(f"NVML initialized for GPU {self.index}")

    def close(self) -> None:
        """Shut NVML down."""
        if not self._initialized:
            return
        try:
            pynvml.nvmlShutdown()
        except pynvml.NVMLError as e:
            logger.warning(f"Error during NVML shutdown: {e}")
        self._initialized = False
        self._handle = None

    @property
    def handle(self):
        if self._handle is None:
            raise DeviceError("NVML not initialized. Call open() first.")
        return self._handle

    # --- Queries ---

    def _query(self, name: str, fn: Callable[[], T]) -> Optional[T]:
        try:
            return fn()
        except (pynvml.NVMLError, AttributeError) as e:
            logger.debug(f"GPU {self.index}: {name} unavailable ({e})")
            return None

    def power_limit(self) -> Optional[int]:
        return self._query("power limit", lambda: pynvml.nvmlDeviceGetEnforcedPowerLimit(self.handle))

    def freq_offset(self) -> Optional[int]:
        return self._query("core clock offset", lambda: pynvml.nvmlDeviceGetGpcClkVfOffset(self.handle))

    def mem_offset(self) -> Optional[int]:
        return self._query("memory clock offset", lambda: pynvml.nvmlDeviceGetMemClkVfOffset(self.handle))

    def graphics_clock(self) -> Optional[int]:
        return self._query(
            "graphics clock", lambda: pynvml.nvmlDeviceGetClockInfo(self.handle, pynvml.NVML_CLOCK_GRAPHICS)
        )

    def memory_clock(self) -> Optional[int]:
        return self._query("memory clock", lambda: pynvml.nvmlDeviceGetClockInfo(self.handle, pynvml.NVML_CLOCK_MEM))

    def max_clock(self) -> Optional[int]:
        return self._query(
            "max graphics clock",
            lambda: pynvml.nvmlDeviceGetMaxClockInfo(self.handle, pynvml.NVML_CLOCK_GRAPHICS),
        )

    def power_usage(self) -> Optional[int]:
        return self._query("power usage", lambda: pynvml.nvmlDeviceGetPowerUsage(self.handle))

    def supported_clocks(self) -> Optional[SupportedClocks]:
        return query_supported_clocks(self.index)

    # --- Writes ---

    def apply(self, configuration: Configuration) -> bool:
        """Write a full candidate configuration; False if any sub-write fails."""
        try:
            pynvml.nvmlDeviceSetPowerManagementLimit(self.handle, configuration.power_limit)
            pynvml.nvmlDeviceSetGpcClkVfOffset(self.handle, configuration.freq_offset)
            pynvml.nvmlDeviceSetMemClkVfOffset(self.handle, configuration.mem_offset)
            pynvml.nvmlDeviceSetGpuLockedClocks(self.handle, configuration.min_clock, configuration.max_clock)
        except pynvml.NVMLError as e:
            logger.warning(f"GPU {self.index}: failed to apply {configuration}: {e}")
            return False
        return True

    def apply_settings(self, settings: DeviceSettings) -> None:
        """Write only the fields present in `settings`.

        Raises:
            DeviceError: On the first rejected write
        """
        writes: list[tuple[str, Callable[[], None]]] = []

        if settings.freq_offset is not None:
            writes.append(
                ("GPU frequency offset", lambda: pynvml.nvmlDeviceSetGpcClkVfOffset(self.handle, settings.freq_offset))
            )
        if settings.mem_offset is not None:
            writes.append(
                (
                    "GPU memory frequency offset",
                    lambda: pynvml.nvmlDeviceSetMemClkVfOffset(self.handle, settings.mem_offset),
                )
            )
        if settings.power_limit is not None:
            writes.append(
                (
                    "GPU power limit",
                    lambda: pynvml.nvmlDeviceSetPowerManagementLimit(self.handle, settings.power_limit),
                )
            )
        if settings.min_clock is not None and settings.max_clock is not None:
            writes.append(
                (
                    "GPU min and max clocks",
                    lambda: pynvml.nvmlDeviceSetGpuLockedClocks(self.handle, settings.min_clock, settings.max_clock),
                )
            )
        if settings.min_mem_clock is not None and settings.max_mem_clock is not None:
            writes.append(
                (
                    "GPU min and max memory clocks",
                    lambda: pynvml.nvmlDeviceSetMemoryLockedClocks(
                        self.handle, settings.min_mem_clock, settings.max_mem_clock
                    ),
                )
            )

        for name, write in writes:
            try:
                write()
            except pynvml.NVMLError as e:
                raise DeviceError(f"Failed to set {name}: {e}") from e
            logger.debug(f"GPU {self.index}: set {name}")
