"""Cycle summary reports for thermoviz.

Produces plain-text, HTML and CSV views of a computed ThermodynamicCycle
and CSV exports of sampled diagrams.
"""

from __future__ import annotations

import csv
import html as html_mod
import io
from datetime import datetime, timezone
from pathlib import Path

from thermoviz import __version__
from thermoviz.cycle.aggregator import ThermodynamicCycle
from thermoviz.cycle.diagrams import DiagramSeries


def performance_rows(cycle: ThermodynamicCycle) -> list[tuple[str, str, str]]:
    """(label, formatted value, unit) rows of the cycle's performance."""
    rows: list[tuple[str, str, str]] = []
    if cycle.is_refrigeration:
        rows.append(("COP", f"{cycle.efficiency:.4f}", ""))
    else:
        rows.append(("Thermal Efficiency", f"{cycle.efficiency * 100:.2f}", "%"))
    rows.append(("Net Work", f"{cycle.net_work:.2f}", "kJ/kg"))
    rows.append(("Heat In", f"{cycle.heat_in:.2f}", "kJ/kg"))
    rows.append(("Heat Out", f"{cycle.heat_out:.2f}", "kJ/kg"))

    optional = (
        ("Entropy Generation", cycle.entropy_generation, "kJ/(kg·K)", ".5f"),
        ("Exergy (peak state)", cycle.exergy, "kJ/kg", ".2f"),
        ("Vapour Quality", cycle.quality, "", ".4f"),
        ("Gibbs Free Energy", cycle.gibbs_free_energy, "kJ/kg", ".2f"),
        ("Helmholtz Free Energy", cycle.helmholtz_free_energy, "kJ/kg", ".2f"),
    )
    for label, value, unit, fmt in optional:
        if value is not None:
            rows.append((label, format(value, fmt), unit))
    return rows


# --- Plain-text report ---


def generate_text_report(cycle: ThermodynamicCycle) -> str:
    """Generate a plain-text cycle summary.

    Args:
        cycle: Computed cycle.

    Returns:
        Multi-line text report string.
    """
    lines: list[str] = []
    _hr = "=" * 72

    lines.append(_hr)
    lines.append("  thermoviz — Cycle Report")
    lines.append(f"  {cycle.name} ({cycle.fluid.name})")
    lines.append(_hr)
    lines.append("")

    lines.append("WORKING FLUID")
    lines.append("-" * 40)
    lines.append(f"  {'R':<20s} {cycle.fluid.R:>12.4f} kJ/(kg·K)")
    lines.append(f"  {'gamma':<20s} {cycle.fluid.gamma:>12.4f}")
    lines.append(f"  {'cp':<20s} {cycle.fluid.cp:>12.4f} kJ/(kg·K)")
    lines.append(f"  {'cv':<20s} {cycle.fluid.cv:>12.4f} kJ/(kg·K)")
    lines.append("")

    state_w = max(24, max(len(s.name) for s in cycle.states) + 2)
    lines.append("STATES")
    lines.append("-" * 72)
    lines.append(
        f"  {'#':<3s}{'Name':<{state_w}s}{'T [K]':>10s}{'P [kPa]':>12s}{'v [m³/kg]':>12s}{'s [kJ/kgK]':>11s}"
    )
    for s in cycle.states:
        lines.append(
            f"  {s.id:<3s}{s.name:<{state_w}s}{s.temperature:>10.2f}{s.pressure:>12.2f}"
            f"{s.volume:>12.5f}{s.entropy:>11.5f}"
        )
    lines.append("")

    proc_w = max(28, max(len(p.name) for p in cycle.processes) + 2)
    lines.append("PROCESSES")
    lines.append("-" * 72)
    lines.append(f"  {'Leg':<6s}{'Name':<{proc_w}s}{'Type':<12s}{'w [kJ/kg]':>12s}{'q [kJ/kg]':>12s}")
    for p in cycle.processes:
        lines.append(
            f"  {p.id:<6s}{p.name:<{proc_w}s}{p.type.value:<12s}{p.work:>12.2f}{p.heat:>12.2f}"
        )
    lines.append("")

    lines.append("PERFORMANCE")
    lines.append("-" * 40)
    for label, value, unit in performance_rows(cycle):
        unit_str = f" {unit}" if unit else ""
        lines.append(f"  {label:<22s} {value:>12}{unit_str}")
    lines.append("")

    lines.append(_hr)
    lines.append(f"  Generated: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}")
    lines.append(f"  thermoviz v{__version__} · cycle {cycle.id}")
    lines.append(_hr)

    return "\n".join(lines)


# --- HTML report ---


def generate_html_report(cycle: ThermodynamicCycle) -> str:
    """Generate a self-contained HTML cycle summary with inline CSS."""
    esc = html_mod.escape
    sections = [_html_header(cycle)]

    state_rows = [
        (
            s.id,
            s.name,
            f"{s.temperature:.2f}",
            f"{s.pressure:.2f}",
            f"{s.volume:.5f}",
            f"{s.enthalpy:.2f}",
            f"{s.entropy:.5f}",
        )
        for s in cycle.states
    ]
    sections.append(
        _html_table(
            "States",
            ("#", "Name", "T [K]", "P [kPa]", "v [m³/kg]", "h [kJ/kg]", "s [kJ/(kg·K)]"),
            state_rows,
        )
    )

    process_rows = [
        (p.id, p.name, p.type.value, f"{p.work:.2f}", f"{p.heat:.2f}", f"{p.entropy_change:.5f}")
        for p in cycle.processes
    ]
    sections.append(
        _html_table(
            "Processes",
            ("Leg", "Name", "Type", "w [kJ/kg]", "q [kJ/kg]", "Δs [kJ/(kg·K)]"),
            process_rows,
        )
    )
    sections.append(
        _html_table("Performance", ("Parameter", "Value", "Unit"), performance_rows(cycle))
    )

    ts = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    sections.append(
        f"""<div class="footer">
Generated: {ts} &middot; thermoviz v{esc(__version__)} &middot; cycle {esc(cycle.id)}
</div>
</body>
</html>"""
    )
    return "\n".join(sections)


def _html_header(cycle: ThermodynamicCycle) -> str:
    title = html_mod.escape(f"{cycle.name} ({cycle.fluid.name})")
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>thermoviz &mdash; {title}</title>
<style>
body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
       max-width: 900px; margin: 2em auto; padding: 0 1em; color: #222; }}
h1 {{ color: #1a365d; border-bottom: 2px solid #2b6cb0; padding-bottom: 0.3em; }}
h2 {{ color: #2b6cb0; margin-top: 1.5em; }}
table {{ width: 100%; border-collapse: collapse; margin: 0.5em 0 1.5em; }}
th, td {{ text-align: left; padding: 0.4em 0.8em; border-bottom: 1px solid #e2e8f0; }}
th {{ background: #ebf4ff; color: #1a365d; }}
.footer {{ margin-top: 2em; padding-top: 1em; border-top: 1px solid #e2e8f0;
           color: #a0aec0; font-size: 0.85em; }}
</style>
</head>
<body>
<h1>thermoviz &mdash; Cycle Report</h1>
<p><strong>{title}</strong></p>
"""


def _html_table(title: str, header: tuple[str, ...], rows: list[tuple[str, ...]]) -> str:
    esc = html_mod.escape
    lines = [f"<h2>{esc(title)}</h2>", "<table>"]
    lines.append("<tr>" + "".join(f"<th>{esc(h)}</th>" for h in header) + "</tr>")
    for row in rows:
        lines.append("<tr>" + "".join(f"<td>{esc(str(c))}</td>" for c in row) + "</tr>")
    lines.append("</table>")
    return "\n".join(lines)


# --- CSV ---


def cycle_to_csv(cycle: ThermodynamicCycle) -> str:
    """States table followed by the processes table, separated by a blank line."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(
        ["state", "name", "temperature_K", "pressure_kPa", "volume_m3_kg",
         "enthalpy_kJ_kg", "entropy_kJ_kgK", "internal_energy_kJ_kg"]
    )
    for s in cycle.states:
        writer.writerow(
            [s.id, s.name, s.temperature, s.pressure, s.volume,
             s.enthalpy, s.entropy, s.internal_energy]
        )
    writer.writerow([])
    writer.writerow(
        ["process", "name", "type", "start_state", "end_state",
         "work_kJ_kg", "heat_kJ_kg", "entropy_change_kJ_kgK"]
    )
    for p in cycle.processes:
        writer.writerow(
            [p.id, p.name, p.type.value, p.start_state.id, p.end_state.id,
             p.work, p.heat, p.entropy_change]
        )
    return buf.getvalue()


def diagram_to_csv(series: DiagramSeries) -> str:
    """One row per sampled point: x, y and the state label of vertices."""
    x_label, y_label = series.diagram_type.axis_labels
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow([x_label, y_label, "state"])
    for p in series:
        writer.writerow([p.x, p.y, p.state or ""])
    return buf.getvalue()


def save_text_report(cycle: ThermodynamicCycle, filepath: str | Path) -> None:
    """Generate and save a plain-text report to a file."""
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(generate_text_report(cycle))


def save_html_report(cycle: ThermodynamicCycle, filepath: str | Path) -> None:
    """Generate and save an HTML report to a file."""
    with open(filepath, "w", encoding="utf-8") as f:
        f.write(generate_html_report(cycle))


def save_csv(text: str, filepath: str | Path) -> None:
    """Write CSV text produced by :func:`cycle_to_csv` or :func:`diagram_to_csv`."""
    with open(filepath, "w", encoding="utf-8", newline="") as f:
        f.write(text)
