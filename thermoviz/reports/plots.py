"""Matplotlib rendering of sampled diagrams.

Figures are built with :class:`matplotlib.figure.Figure` directly, so no
pyplot global state or GUI backend is involved.
"""

from __future__ import annotations

import logging
from pathlib import Path

from matplotlib.figure import Figure

from thermoviz.cycle.diagrams import DiagramSeries, DiagramType

logger = logging.getLogger(__name__)


def diagram_figure(
    series: DiagramSeries,
    figsize: tuple[float, float] = (6.0, 4.5),
    color: str = "steelblue",
    linewidth: float = 1.5,
) -> Figure:
    """Draw a sampled diagram with its labelled state points.

    PV diagrams use a logarithmic volume axis, since compression ratios of
    10 or more squeeze the high-pressure legs against the axis otherwise.
    """
    fig = Figure(figsize=figsize, dpi=100)
    ax = fig.add_subplot(111)

    x, y = series.to_arrays()
    ax.plot(x, y, color=color, linewidth=linewidth)

    for point in series.vertices[:-1]:
        ax.plot(point.x, point.y, "o", color="darkred", markersize=4)
        ax.annotate(
            point.state,
            (point.x, point.y),
            textcoords="offset points",
            xytext=(5, 5),
            fontsize=7,
        )

    if series.diagram_type is DiagramType.PV:
        ax.set_xscale("log")

    xlabel, ylabel = series.diagram_type.axis_labels
    ax.set_xlabel(xlabel, fontsize=9)
    ax.set_ylabel(ylabel, fontsize=9)
    ax.set_title(
        f"{series.cycle.name} ({series.cycle.fluid.name}): {series.diagram_type.title}",
        fontsize=10,
    )
    ax.grid(True, alpha=0.3)
    ax.tick_params(labelsize=8)
    fig.tight_layout()
    return fig


def plot_diagram(series: DiagramSeries, path: str | Path, dpi: int = 150) -> Path:
    """Render a diagram to an image file. The format follows the suffix."""
    path = Path(path)
    fig = diagram_figure(series)
    fig.savefig(path, dpi=dpi)
    logger.info("Saved %s to %s", series.diagram_type.title, path)
    return path
