"""Tune CLI command: run the power limit / clock offset search."""

import logging
from contextlib import nullcontext
from pathlib import Path

import click
from pydantic import ValidationError

from nvidia_oc.configs.default import TuneConfig
from nvidia_oc.core.errors import DeviceError
from nvidia_oc.core.types import Baseline, SupportedClocks
from nvidia_oc.device.nvml import NvmlDevice
from nvidia_oc.device.simulated import SimulatedDevice
from nvidia_oc.recording import CsvBackend, MemoryBackend
from nvidia_oc.tuning import CommandProbe, ScriptedProbe, tune
from nvidia_oc.utils.config import load_config
from nvidia_oc.utils.privileges import escalate_permissions

logger = logging.getLogger(__name__)

# Device reported by --simulate
SIMULATED_BASELINE = Baseline(
    power_limit=150_000,
    freq_offset=0,
    mem_offset=0,
    graphics_clock=1_800,
    memory_clock=7_000,
    max_clock=2_100,
)
SIMULATED_CLOCKS = SupportedClocks(
    graphics=(1_500, 1_600, 1_700, 1_800, 1_900, 2_000, 2_100),
    memory=(5_000, 6_000, 7_000),
)


def build_config(config_path: Path | None, overrides: dict) -> TuneConfig:
    """Load the YAML config (if any) and apply command-line overrides."""
    try:
        config = load_config(config_path, TuneConfig) if config_path else TuneConfig()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration file {config_path}: {e}")

    top = {key: overrides[key] for key in ("gpu_index", "results_path") if overrides.get(key) is not None}
    search = {
        key: overrides[key] for key in ("step_power", "max_crash_cycles") if overrides.get(key) is not None
    }
    probe = {
        key: overrides[key]
        for key in ("command", "timeout_s", "sample_interval_s")
        if overrides.get(key) is not None
    }

    return config.model_copy(
        update={
            **top,
            "search": config.search.model_copy(update=search),
            "probe": config.probe.model_copy(update=probe),
        }
    )


@click.command()
@click.option("-i", "--index", "gpu_index", type=click.IntRange(min=0), default=None, help="GPU index (default: 0)")
@click.option("-c", "--command", type=str, default=None, help="Benchmark command used as the stability probe")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with tuning settings",
)
@click.option(
    "--results",
    "results_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Results CSV (default: ~/Documents/nvidia_oc_results.csv)",
)
@click.option("--step-power", type=click.IntRange(min=1), default=None, help="Power limit step in milliwatts")
@click.option(
    "--max-crash-cycles",
    type=click.IntRange(min=0),
    default=None,
    help="Instability events tolerated before the search stops",
)
@click.option("--timeout", "timeout_s", type=click.FloatRange(min=0, min_open=True), default=None)
@click.option("--sample-interval", "sample_interval_s", type=click.FloatRange(min=0, min_open=True), default=None)
@click.option("--simulate", is_flag=True, help="Dry run against a simulated GPU")
@click.option("-q", "--quiet", is_flag=True, help="Only log warnings and errors")
def tune_command(config_path: Path | None, simulate: bool, quiet: bool, **overrides) -> None:
    """Search for the lowest stable power limit and clock offsets.

    Each candidate configuration is applied and validated by running the
    benchmark command; the device is restored to its original settings at the
    end. Every validated configuration is appended to the results CSV.

    \b
    # Tune GPU 0 with a benchmark that prints "score: <n>"
    nvidia-oc tune --command "./bench.sh"

    \b
    # Dry run of the search schedule
    nvidia-oc tune --simulate
    """
    if quiet:
        logging.getLogger("nvidia_oc").setLevel(logging.WARNING)

    config = build_config(config_path, overrides)

    if simulate:
        device_context = nullcontext(SimulatedDevice(SIMULATED_BASELINE, SIMULATED_CLOCKS))
        sinks = [CsvBackend(config.results_path)] if overrides.get("results_path") else [MemoryBackend()]
        probe = CommandProbe.from_config(config.probe) if config.probe.command else ScriptedProbe()
    else:
        if not config.probe.command:
            raise click.UsageError("A benchmark command is required (--command or probe.command in --config)")
        escalate_permissions()
        device_context = NvmlDevice(config.gpu_index)
        sinks = [CsvBackend(config.results_path)]
        probe = CommandProbe.from_config(config.probe)

    try:
        with device_context as device:
            result = tune(device, probe, sinks=sinks, settings=config.search, verbose=not quiet)
    except DeviceError as e:
        raise click.ClickException(str(e))

    click.echo(f"{len(result.records)} stable configuration(s) recorded ({result.termination.value}).")
    if isinstance(sinks[0], CsvBackend):
        click.echo(f"Results saved to {config.results_path}")
    if not result.restored:
        click.echo("Warning: failed to restore the original GPU settings.", err=True)


__all__ = ["tune_command", "build_config"]
