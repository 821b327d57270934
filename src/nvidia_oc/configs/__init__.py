from .default import (
    DEFAULT_CONFIG_FILE,
    DeviceSettings,
    OverclockConfig,
    ProbeConfig,
    SearchSettings,
    TuneConfig,
    default_results_path,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "DeviceSettings",
    "OverclockConfig",
    "ProbeConfig",
    "SearchSettings",
    "TuneConfig",
    "default_results_path",
]
