"""Error taxonomy.

Inside the search loop ApplyFailure, InstabilityDetected, CrashBudgetExhausted
and RestorationFailure describe outcomes that are handled locally and logged;
they are never raised out of `SearchController.run()`. DeviceError is raised
by the NVML layer when a direct settings write or a device lookup fails.
"""


class NvidiaOcError(Exception):
    """Base class for all nvidia-oc errors."""


class DeviceError(NvidiaOcError):
    """The device could not be opened or a settings write was rejected."""


class ApplyFailure(NvidiaOcError):
    """A candidate configuration write was rejected by the device."""


class InstabilityDetected(NvidiaOcError):
    """The stability probe reported that a candidate made the device unreliable."""


class CrashBudgetExhausted(NvidiaOcError):
    """Too many instability events during one run."""


class RestorationFailure(NvidiaOcError):
    """The final rollback to the baseline configuration failed."""
