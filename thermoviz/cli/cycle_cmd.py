"""CLI commands for cycle analysis."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from thermoviz.cli.options import CYCLE_TYPES, build_config, cycle_options, handle_errors
from thermoviz.core.config import save_cycle_json
from thermoviz.core.presets import list_presets
from thermoviz.cycle.aggregator import ThermodynamicCycle
from thermoviz.cycle.engine import CycleEngine
from thermoviz.cycle.parameters import CycleType
from thermoviz.reports.summary import (
    cycle_to_csv,
    performance_rows,
    save_csv,
    save_html_report,
    save_text_report,
)


@click.group("cycle")
@click.pass_context
def cycle(ctx: click.Context) -> None:
    """Thermodynamic cycle analysis commands."""
    pass


def print_cycle(console: Console, result: ThermodynamicCycle) -> None:
    """Print the state, process and performance tables of a cycle."""
    console.print(f"\n[bold]thermoviz — {result.name} ({result.fluid.name})[/bold]\n")

    state_table = Table(title="States")
    state_table.add_column("#", style="cyan")
    state_table.add_column("Name")
    state_table.add_column("T [K]", justify="right", style="green")
    state_table.add_column("P [kPa]", justify="right", style="green")
    state_table.add_column("v [m³/kg]", justify="right")
    state_table.add_column("h [kJ/kg]", justify="right")
    state_table.add_column("s [kJ/kg·K]", justify="right")
    for s in result.states:
        state_table.add_row(
            s.id,
            s.name,
            f"{s.temperature:.2f}",
            f"{s.pressure:.2f}",
            f"{s.volume:.5f}",
            f"{s.enthalpy:.2f}",
            f"{s.entropy:.5f}",
        )
    console.print(state_table)

    proc_table = Table(title="Processes")
    proc_table.add_column("Leg", style="cyan")
    proc_table.add_column("Name")
    proc_table.add_column("Type", style="yellow")
    proc_table.add_column("w [kJ/kg]", justify="right", style="green")
    proc_table.add_column("q [kJ/kg]", justify="right", style="green")
    proc_table.add_column("Δs [kJ/kg·K]", justify="right")
    for p in result.processes:
        proc_table.add_row(
            p.id,
            p.name,
            p.type.value,
            f"{p.work:.2f}",
            f"{p.heat:.2f}",
            f"{p.entropy_change:.5f}",
        )
    console.print(proc_table)

    perf_table = Table(title="Performance")
    perf_table.add_column("Parameter", style="cyan")
    perf_table.add_column("Value", style="green", justify="right")
    perf_table.add_column("Unit", style="dim")
    for label, value, unit in performance_rows(result):
        perf_table.add_row(label, value, unit or "—")
    console.print(perf_table)


@cycle.command("analyze")
@cycle_options
@click.option("--extended", is_flag=True, help="Also compute entropy generation, exergy and free energies.")
@click.option("--output", "-o", type=click.Path(), default=None, help="Save the result (JSON).")
@click.option("--csv", "csv_path", type=click.Path(), default=None, help="Save states and processes (CSV).")
@click.option(
    "--report",
    type=click.Path(),
    default=None,
    help="Save a report; .html gives HTML, anything else plain text.",
)
@click.pass_context
@handle_errors
def analyze_cmd(
    ctx: click.Context,
    cycle_type: str | None,
    fluid: str | None,
    coolprop: bool,
    params: tuple[str, ...],
    preset: str | None,
    extended: bool,
    output: str | None,
    csv_path: str | None,
    report: str | None,
) -> None:
    """Compute a cycle and print its states, processes and performance."""
    console: Console = ctx.obj.get("console", Console())
    engine: CycleEngine = ctx.obj["engine"]

    config = build_config(cycle_type, fluid, coolprop, params, preset)
    result = engine.compute_cycle(config, extended=extended)
    print_cycle(console, result)

    if output:
        save_cycle_json(result, output)
        console.print(f"\n[dim]Saved to {output}[/dim]")
    if csv_path:
        save_csv(cycle_to_csv(result), csv_path)
        console.print(f"[dim]Saved CSV to {csv_path}[/dim]")
    if report:
        if Path(report).suffix.lower() in (".html", ".htm"):
            save_html_report(result, report)
        else:
            save_text_report(result, report)
        console.print(f"[dim]Saved report to {report}[/dim]")


@cycle.command("compare")
@click.option(
    "--type",
    "cycle_type",
    type=click.Choice(CYCLE_TYPES, case_sensitive=False),
    default=None,
    help="Only presets of this cycle type.",
)
@click.pass_context
@handle_errors
def compare_cmd(ctx: click.Context, cycle_type: str | None) -> None:
    """Compare the performance of the built-in presets."""
    console: Console = ctx.obj.get("console", Console())
    engine: CycleEngine = ctx.obj["engine"]

    ctype = CycleType(cycle_type.lower()) if cycle_type else None
    table = Table(title="Preset Comparison")
    table.add_column("Preset", style="cyan")
    table.add_column("Cycle")
    table.add_column("Fluid", style="yellow")
    table.add_column("η / COP", justify="right", style="green")
    table.add_column("Net Work [kJ/kg]", justify="right")
    table.add_column("Heat In [kJ/kg]", justify="right")

    for preset in list_presets(ctype):
        result = engine.compute_cycle(preset.to_config())
        if result.is_refrigeration:
            perf = f"COP {result.efficiency:.2f}"
        else:
            perf = f"{result.efficiency * 100:.2f} %"
        table.add_row(
            preset.id,
            result.name,
            result.fluid.name,
            perf,
            f"{result.net_work:.2f}",
            f"{result.heat_in:.2f}",
        )
    console.print(table)
