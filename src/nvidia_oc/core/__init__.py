from .errors import (
    ApplyFailure,
    CrashBudgetExhausted,
    DeviceError,
    InstabilityDetected,
    NvidiaOcError,
    RestorationFailure,
)
from .types import Baseline, Configuration, ProbeResult, Record, SupportedClocks, TerminationReason

__all__ = [
    "Baseline",
    "Configuration",
    "ProbeResult",
    "Record",
    "SupportedClocks",
    "TerminationReason",
    "NvidiaOcError",
    "DeviceError",
    "ApplyFailure",
    "InstabilityDetected",
    "CrashBudgetExhausted",
    "RestorationFailure",
]
