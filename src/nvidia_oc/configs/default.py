"""
Defines the schema for nvidia-oc configuration using Pydantic models.

Two kinds of configuration live here:
- DeviceSettings / OverclockConfig: fixed settings written straight to one or
  more GPUs (the `set` command and the boot-time config file)
- SearchSettings / ProbeConfig / TuneConfig: parameters of an autotuning run
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, PositiveFloat, PositiveInt, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_CONFIG_FILE = Path("/etc/nvidia_oc.json")
RESULTS_FILENAME = "nvidia_oc_results.csv"
DEFAULT_SCORE_PATTERN = r"score\s*[:=]\s*([-+]?\d+(?:\.\d+)?)"


def default_results_path() -> Path:
    """Results CSV location: ~/Documents/nvidia_oc_results.csv."""
    return Path.home() / "Documents" / RESULTS_FILENAME


class DeviceSettings(BaseModel):
    """Settings to write to one GPU. Only the fields that are set are written.

    Clock ranges come in pairs: a minimum requires its maximum and vice versa.
    Accepts camelCase keys (`freqOffset`, `powerLimit`, ...) in config files.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    freq_offset: int | None = None  # MHz
    mem_offset: int | None = None  # MHz
    power_limit: NonNegativeInt | None = None  # milliwatts
    min_clock: NonNegativeInt | None = None
    max_clock: NonNegativeInt | None = None
    min_mem_clock: NonNegativeInt | None = None
    max_mem_clock: NonNegativeInt | None = None

    @model_validator(mode="after")
    def validate_pairs(self) -> "DeviceSettings":
        """Clock ranges must be complete and at least one setting must be given."""
        for low, high in (("min_clock", "max_clock"), ("min_mem_clock", "max_mem_clock")):
            if (getattr(self, low) is None) != (getattr(self, high) is None):
                raise ValueError(f"{low} and {high} must be given together")

        if all(value is None for value in self.model_dump().values()):
            raise ValueError("at least one setting must be given")
        return self


class OverclockConfig(BaseModel):
    """Config file contents: settings per GPU index."""

    sets: dict[NonNegativeInt, DeviceSettings]


class SearchSettings(BaseModel):
    """Parameters of the power/clock search loop.

    With the defaults the run aborts after the third instability, and the
    first (usually zero) step of each clock axis is skipped.
    """

    step_power: PositiveInt = 5_000  # milliwatts per power step
    max_crash_cycles: NonNegativeInt = 2
    skip_first_step: bool = True


class ProbeConfig(BaseModel):
    """Stability probe that runs an external benchmark command."""

    command: str | None = None  # shell-style command line, split with shlex
    timeout_s: PositiveFloat = 300.0  # a run longer than this counts as a hang
    sample_interval_s: PositiveFloat = 1.0  # power draw sampling period
    score_pattern: str = DEFAULT_SCORE_PATTERN


class TuneConfig(BaseModel):
    """Full configuration of an autotuning run."""

    gpu_index: NonNegativeInt = 0
    results_path: Path = Field(default_factory=default_results_path)
    search: SearchSettings = Field(default_factory=SearchSettings)
    probe: ProbeConfig = Field(default_factory=ProbeConfig)
