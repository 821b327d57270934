"""Plotting functions for search results."""

from pathlib import Path
from typing import Any, Dict, List, Union

import plotly.graph_objects as go
from plotly.subplots import make_subplots


def plot_results(
    rows: List[Dict[str, Any]],
    filename: Union[str, Path] = "nvidia_oc_results.html",
) -> Path:
    """
    Plots benchmark score and measured power against the power limit.

    Args:
        rows (List[Dict[str, Any]]): Rows as returned by `load_records`.
        filename (Union[str, Path]): The name of the HTML file to save the plot to.

    Returns:
        Path of the written file.
    """
    if isinstance(filename, str):
        filename = Path(filename)
    filename.parent.mkdir(parents=True, exist_ok=True)

    fig = make_subplots(
        rows=2,
        cols=1,
        shared_xaxes=True,
        vertical_spacing=0.1,
        subplot_titles=("Score", "Average Power"),
    )

    power_limits = [row["power_limit_w"] for row in rows]
    labels = [
        f"core {row['freq_offset']:+d} MHz, mem {row['mem_offset']:+d} MHz, "
        f"clocks {row['min_clock']}-{row['max_clock']} MHz"
        for row in rows
    ]

    fig.add_trace(
        go.Scatter(
            x=power_limits,
            y=[row["score"] for row in rows],
            mode="markers",
            name="Score",
            text=labels,
            marker=dict(color="green"),
        ),
        row=1,
        col=1,
    )

    fig.add_trace(
        go.Scatter(
            x=power_limits,
            y=[row["avg_power_w"] for row in rows],
            mode="markers",
            name="Average Power",
            text=labels,
            marker=dict(color="blue"),
        ),
        row=2,
        col=1,
    )

    fig.update_layout(
        title_text="Power Limit Search Results",
        xaxis2_title_text="Power Limit (W)",
    )
    fig.update_yaxes(title_text="Score", row=1, col=1)
    fig.update_yaxes(title_text="Average Power (W)", row=2, col=1)

    fig.write_html(str(filename))
    return filename
