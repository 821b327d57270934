"""Plot CLI command for search results."""

from pathlib import Path

import click

from nvidia_oc.configs.default import default_results_path
from nvidia_oc.recording import load_records
from nvidia_oc.utils.plotting import plot_results


@click.command()
@click.argument("results", type=click.Path(exists=True, dir_okay=False, path_type=Path), required=False)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output HTML file (default: next to the results file)",
)
def plot(results: Path | None, output: Path | None) -> None:
    """Plot score and average power against the power limit.

    RESULTS defaults to ~/Documents/nvidia_oc_results.csv.
    """
    if results is None:
        results = default_results_path()
        if not results.exists():
            raise click.ClickException(f"No results file found at {results}")

    rows = load_records(results)
    if not rows:
        raise click.ClickException(f"No records in {results}")

    path = plot_results(rows, output or results.with_suffix(".html"))
    click.echo(f"Plotted {len(rows)} record(s) to {path}")


__all__ = ["plot"]
