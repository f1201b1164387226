"""CLI commands for listing fluids, presets and engine settings."""

from __future__ import annotations

from dataclasses import asdict

import click
from rich.console import Console
from rich.table import Table

from thermoviz.core.config import EngineSettings
from thermoviz.core.fluids import fluid_table
from thermoviz.core.presets import list_presets
from thermoviz.cycle.parameters import PARAMETER_TYPES


@click.group("info")
@click.pass_context
def info(ctx: click.Context) -> None:
    """List fluids, presets, cycle parameters and settings."""
    pass


@info.command("fluids")
@click.pass_context
def info_fluids(ctx: click.Context) -> None:
    """List the working fluids of the property table."""
    console: Console = ctx.obj.get("console", Console())
    table = Table(title="Working Fluids")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("R [kJ/kg·K]", justify="right")
    table.add_column("γ", justify="right")
    table.add_column("cp [kJ/kg·K]", justify="right")
    table.add_column("cv [kJ/kg·K]", justify="right")

    for fluid_id, fluid in fluid_table().items():
        table.add_row(
            fluid_id,
            fluid.name,
            f"{fluid.R:.4f}",
            f"{fluid.gamma:.3f}",
            f"{fluid.cp:.4f}",
            f"{fluid.cv:.4f}",
        )
    console.print(table)


@info.command("presets")
@click.pass_context
def info_presets(ctx: click.Context) -> None:
    """List the built-in cycle presets."""
    console: Console = ctx.obj.get("console", Console())
    table = Table(title="Cycle Presets")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Cycle", style="yellow")
    table.add_column("Fluid")
    table.add_column("Parameters", style="dim")

    for preset in list_presets():
        params = ", ".join(f"{k}={v:g}" for k, v in preset.parameters.items())
        table.add_row(preset.id, preset.name, preset.cycle_type.value, preset.fluid, params)
    console.print(table)


@info.command("parameters")
@click.pass_context
def info_parameters(ctx: click.Context) -> None:
    """List the parameter keys each cycle type accepts."""
    console: Console = ctx.obj.get("console", Console())
    table = Table(title="Cycle Parameters")
    table.add_column("Cycle", style="cyan")
    table.add_column("Required", style="green")
    table.add_column("Optional", style="dim")

    for ctype, cls in PARAMETER_TYPES.items():
        required = cls.required_keys()
        optional = [k for k in cls.keys() if k not in required]
        table.add_row(ctype.value, ", ".join(required), ", ".join(optional) or "—")
    console.print(table)


@info.command("settings")
@click.pass_context
def info_settings(ctx: click.Context) -> None:
    """Show the engine settings in effect."""
    console: Console = ctx.obj.get("console", Console())
    settings: EngineSettings = ctx.obj.get("settings", EngineSettings())
    table = Table(title="Engine Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green", justify="right")
    for key, value in asdict(settings).items():
        table.add_row(key, str(value))
    console.print(table)
