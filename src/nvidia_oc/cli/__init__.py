"""nvidia-oc CLI - Command-line interface for NVIDIA GPU tuning.

This module provides a unified CLI with subcommands for writing and reading
GPU settings, autotuning power limit and clock offsets, and plotting results.

Usage:
    nvidia-oc                  Apply the settings in /etc/nvidia_oc.json
    nvidia-oc --help           Show available commands
    nvidia-oc set --help       Show settings options
    nvidia-oc tune --help      Show tuning options

Examples:
    # Lower the power limit of GPU 0 to 200 W
    nvidia-oc set --index 0 --power-limit 200000

    # Undervolt search with a benchmark command
    nvidia-oc tune --index 0 --command "./bench.sh"

    # Plot the recorded results
    nvidia-oc plot ~/Documents/nvidia_oc_results.csv
"""

import logging
from pathlib import Path

import click

from nvidia_oc.cli.completion import completion
from nvidia_oc.cli.plot import plot
from nvidia_oc.cli.settings import apply_config_file, get_command, set_command
from nvidia_oc.cli.tune import tune_command
from nvidia_oc.configs.default import DEFAULT_CONFIG_FILE


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


@click.group(invoke_without_command=True)
@click.version_option(package_name="nvidia-oc")
@click.option(
    "-f",
    "--file",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="Path to the config file",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_file: Path, verbose: bool) -> None:
    """nvidia-oc: NVIDIA GPU power limit and clock offset control.

    Without a subcommand, applies the per-GPU settings from the config file.
    """
    setup_logging(verbose)
    if ctx.invoked_subcommand is None:
        apply_config_file(config_file)


# Register subcommands
main.add_command(set_command, name="set")
main.add_command(get_command, name="get")
main.add_command(tune_command, name="tune")
main.add_command(plot, name="plot")
main.add_command(completion, name="completion")


__all__ = ["main"]
