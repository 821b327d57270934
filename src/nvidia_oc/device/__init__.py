"""Device-control layer.

DeviceControl is the capability the search consumes. NvmlDevice talks to real
hardware through NVML; SimulatedDevice is an in-memory stand-in.
"""

from .base import DeviceControl
from .clocks import parse_supported_clocks, query_supported_clocks
from .simulated import SimulatedDevice

__all__ = [
    "DeviceControl",
    "SimulatedDevice",
    "parse_supported_clocks",
    "query_supported_clocks",
]
