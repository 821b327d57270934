"""Direct settings commands: write fixed settings to a GPU or read them back."""

import logging
from pathlib import Path

import click
from pydantic import ValidationError

from nvidia_oc.configs.default import DeviceSettings, OverclockConfig
from nvidia_oc.core.errors import DeviceError
from nvidia_oc.device.nvml import NvmlDevice
from nvidia_oc.utils.config import load_config
from nvidia_oc.utils.privileges import escalate_permissions

logger = logging.getLogger(__name__)


def apply_config_file(path: Path) -> None:
    """Write the settings of every GPU listed in a config file."""
    try:
        config = load_config(path, OverclockConfig)
    except FileNotFoundError:
        raise click.ClickException(
            "Configuration file not found and no valid arguments were provided. "
            "Run `nvidia-oc --help` for more information."
        )
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration file {path}: {e}")

    escalate_permissions()

    try:
        for index, settings in config.sets.items():
            with NvmlDevice(index) as device:
                device.apply_settings(settings)
            logger.debug(f"Applied settings to GPU {index}")
    except DeviceError as e:
        raise click.ClickException(str(e))

    click.echo("Successfully set GPU parameters.")


@click.command(name="set")
@click.option("-i", "--index", type=click.IntRange(min=0), required=True, help="GPU index")
@click.option("-f", "--freq-offset", type=int, default=None, help="GPU frequency offset (MHz)")
@click.option("--mem-offset", type=int, default=None, help="GPU memory frequency offset (MHz)")
@click.option("-p", "--power-limit", type=click.IntRange(min=0), default=None, help="GPU power limit in milliwatts")
@click.option("--min-clock", type=click.IntRange(min=0), default=None, help="GPU min clock (requires --max-clock)")
@click.option("--max-clock", type=click.IntRange(min=0), default=None, help="GPU max clock (requires --min-clock)")
@click.option(
    "--min-mem-clock",
    type=click.IntRange(min=0),
    default=None,
    help="GPU min memory clock (requires --max-mem-clock)",
)
@click.option(
    "--max-mem-clock",
    type=click.IntRange(min=0),
    default=None,
    help="GPU max memory clock (requires --min-mem-clock)",
)
def set_command(index: int, **values) -> None:
    """Set GPU parameters like frequency offset and power limit."""
    try:
        settings = DeviceSettings(**values)
    except ValidationError as e:
        messages = "; ".join(error["msg"].removeprefix("Value error, ") for error in e.errors())
        raise click.UsageError(messages)

    escalate_permissions()

    try:
        with NvmlDevice(index) as device:
            device.apply_settings(settings)
    except DeviceError as e:
        raise click.ClickException(str(e))

    click.echo("Successfully set GPU parameters.")


@click.command(name="get")
@click.option("-i", "--index", type=click.IntRange(min=0), required=True, help="GPU index")
def get_command(index: int) -> None:
    """Get GPU parameters."""
    try:
        with NvmlDevice(index) as device:
            freq_offset = device.freq_offset()
            mem_offset = device.mem_offset()
            power_limit = device.power_limit()
    except DeviceError as e:
        raise click.ClickException(str(e))

    if freq_offset is not None:
        click.echo(f"GPU core clock offset: {freq_offset} MHz")
    else:
        click.echo("Failed to get GPU core clock offset", err=True)

    if mem_offset is not None:
        click.echo(f"GPU memory clock offset: {mem_offset} MHz")
    else:
        click.echo("Failed to get GPU memory clock offset", err=True)

    if power_limit is not None:
        click.echo(f"GPU power limit: {power_limit // 1000} W")
    else:
        click.echo("Failed to get GPU power limit", err=True)


__all__ = ["apply_config_file", "set_command", "get_command"]
