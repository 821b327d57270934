"""Device-control capability consumed by the search."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from nvidia_oc.core.types import Configuration, SupportedClocks


@runtime_checkable
class DeviceControl(Protocol):
    """Write and query access to a single GPU.

    Queries return None when the device does not report the value.
    """

    def apply(self, configuration: Configuration) -> bool:
        """Write power limit, core offset, memory offset and locked clock range.

        All-or-nothing from the caller's point of view: returns False if any
        of the sub-writes failed.
        """
        ...

    def power_limit(self) -> Optional[int]: ...

    def freq_offset(self) -> Optional[int]: ...

    def mem_offset(self) -> Optional[int]: ...

    def graphics_clock(self) -> Optional[int]: ...

    def memory_clock(self) -> Optional[int]: ...

    def max_clock(self) -> Optional[int]: ...

    def supported_clocks(self) -> Optional[SupportedClocks]: ...

    def power_usage(self) -> Optional[int]:
        """Current power draw in milliwatts."""
        ...
