"""CLI command for sampling property diagrams."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from thermoviz.cli.options import build_config, cycle_options, handle_errors
from thermoviz.cycle.diagrams import DiagramType, enclosed_area
from thermoviz.cycle.engine import CycleEngine
from thermoviz.reports.plots import plot_diagram
from thermoviz.reports.summary import diagram_to_csv, save_csv


@click.command("diagram")
@cycle_options
@click.option(
    "--diagram",
    "diagram_type",
    type=click.Choice([d.value for d in DiagramType], case_sensitive=False),
    default="pv",
    show_default=True,
    help="Property diagram to sample.",
)
@click.option(
    "--samples",
    type=click.IntRange(min=1),
    default=None,
    help="Intervals per process leg [default: from settings, 20].",
)
@click.option("--plot", type=click.Path(), default=None, help="Render the diagram to an image (PNG, SVG, PDF).")
@click.option("--output", "-o", type=click.Path(), default=None, help="Save the sampled points (CSV).")
@click.pass_context
@handle_errors
def diagram(
    ctx: click.Context,
    cycle_type: str | None,
    fluid: str | None,
    coolprop: bool,
    params: tuple[str, ...],
    preset: str | None,
    diagram_type: str,
    samples: int | None,
    plot: str | None,
    output: str | None,
) -> None:
    """Sample the PV, TS, PH or h-s diagram of a cycle."""
    console: Console = ctx.obj.get("console", Console())
    engine: CycleEngine = ctx.obj["engine"]

    config = build_config(cycle_type, fluid, coolprop, params, preset)
    result = engine.compute_cycle(config)
    series = engine.sample_diagram(result, diagram_type, samples)

    x_label, y_label = series.diagram_type.axis_labels
    table = Table(title=f"{result.name}: {series.diagram_type.title}")
    table.add_column("State", style="cyan")
    table.add_column(x_label, justify="right", style="green")
    table.add_column(y_label, justify="right", style="green")
    for point in series.vertices[:-1]:
        table.add_row(point.state, f"{point.x:.5g}", f"{point.y:.5g}")
    console.print(table)

    console.print(f"Points: {len(series)} ({series.samples_per_leg} intervals per leg)")
    if series.diagram_type in (DiagramType.PV, DiagramType.TS):
        console.print(
            f"Enclosed area: {enclosed_area(series):.2f} kJ/kg "
            f"(net work {result.net_work:.2f} kJ/kg)"
        )

    if output:
        save_csv(diagram_to_csv(series), output)
        console.print(f"[dim]Saved points to {output}[/dim]")
    if plot:
        plot_diagram(series, plot)
        console.print(f"[dim]Saved plot to {plot}[/dim]")
