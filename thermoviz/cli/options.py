"""Options and helpers shared by the cycle and diagram commands."""

from __future__ import annotations

import functools
from typing import Any, Callable

import click
from rich.console import Console
from rich.markup import escape

from thermoviz.core.errors import ThermoError
from thermoviz.core.fluids import fluid_from_coolprop, lookup
from thermoviz.core.presets import get_preset
from thermoviz.cycle.parameters import CycleType, SimulationConfig

CYCLE_TYPES = [t.value for t in CycleType]


def parse_parameters(values: tuple[str, ...]) -> dict[str, float]:
    """Turn ``("T1=300", "P1=100")`` into ``{"T1": 300.0, "P1": 100.0}``."""
    params: dict[str, float] = {}
    for item in values:
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'", param_hint="-p")
        try:
            params[key] = float(raw)
        except ValueError:
            raise click.BadParameter(
                f"value of '{key}' is not a number: '{raw}'", param_hint="-p"
            ) from None
    return params


def cycle_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options selecting a cycle: type, fluid, parameters or a preset."""
    options = [
        click.option(
            "--type",
            "cycle_type",
            type=click.Choice(CYCLE_TYPES, case_sensitive=False),
            default=None,
            help="Cycle type (taken from the preset when omitted).",
        ),
        click.option(
            "--fluid",
            default=None,
            help="Working fluid from the property table [default: air].",
        ),
        click.option(
            "--coolprop",
            is_flag=True,
            help="Derive the fluid constants from CoolProp instead of the table.",
        ),
        click.option(
            "--param",
            "-p",
            "params",
            multiple=True,
            metavar="KEY=VALUE",
            help="Cycle parameter, e.g. -p T1=300 -p compressionRatio=8.",
        ),
        click.option("--preset", default=None, help="Start from a named preset."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_config(
    cycle_type: str | None,
    fluid: str | None,
    coolprop: bool,
    params: tuple[str, ...],
    preset: str | None,
) -> SimulationConfig:
    """Resolve the command-line selection into a validated configuration.

    Explicit ``-p`` values and ``--fluid`` override the preset's.
    """
    overrides = parse_parameters(params)
    if preset:
        try:
            p = get_preset(preset)
        except KeyError as exc:
            raise click.BadParameter(exc.args[0], param_hint="--preset") from None
        if cycle_type and CycleType(cycle_type.lower()) is not p.cycle_type:
            raise click.UsageError(
                f"Preset '{preset}' is a {p.cycle_type.value} cycle, not {cycle_type}"
            )
        ctype: str | CycleType = p.cycle_type
        fluid_name = fluid or p.fluid
        mapping = {**p.parameters, **overrides}
    else:
        if not cycle_type:
            raise click.UsageError("Give a cycle --type or a --preset")
        ctype = cycle_type
        fluid_name = fluid or "air"
        mapping = overrides

    props = fluid_from_coolprop(fluid_name) if coolprop else lookup(fluid_name)
    return SimulationConfig.from_mapping(props, ctype, mapping)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report calculation errors in red and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (ThermoError, ValueError) as exc:
            message = str(exc)
        ctx = click.get_current_context()
        console: Console = ctx.obj.get("console", Console())
        console.print(f"[bold red]Error:[/bold red] {escape(message)}")
        ctx.exit(1)

    return wrapper
