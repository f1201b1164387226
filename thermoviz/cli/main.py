"""thermoviz command-line interface.

Entry point for the ``thermoviz`` CLI tool.
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from thermoviz import __app_name__, __version__
from thermoviz.core.config import EngineSettings, load_settings
from thermoviz.cycle.engine import CycleEngine

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Route log records through rich, at debug level when *verbose*."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name=__app_name__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Engine settings file (JSON).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, settings_path: str | None) -> None:
    """thermoviz — Thermodynamic cycle analysis.

    Computes state points, process legs and performance of Otto, Diesel,
    Brayton, Carnot, Rankine and refrigeration cycles, and samples their
    PV, TS and PH diagrams.
    """
    configure_logging(verbose)
    try:
        settings = load_settings(settings_path) if settings_path else EngineSettings()
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--settings") from exc

    ctx.ensure_object(dict)
    ctx.obj["console"] = console
    ctx.obj["settings"] = settings
    ctx.obj["engine"] = CycleEngine(settings)


# Import and register sub-command groups
from thermoviz.cli.cycle_cmd import cycle  # noqa: E402
from thermoviz.cli.diagram_cmd import diagram  # noqa: E402
from thermoviz.cli.info_cmd import info  # noqa: E402

cli.add_command(cycle)
cli.add_command(diagram)
cli.add_command(info)


def main() -> None:
    """Convenience wrapper for entry-point scripts."""
    cli()
