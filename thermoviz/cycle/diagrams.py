"""Diagram sampling for computed cycles.

Each process leg is traced along its own P–v relation rather than by
straight lines between the vertices, then every sample is projected onto
the diagram axes with the ideal-gas relations:

    pv   x = v [m³/kg]        y = P [kPa]
    ts   x = s [kJ/(kg·K)]    y = T [K]
    ph   x = h [kJ/kg]        y = P [kPa]
    hs   x = s [kJ/(kg·K)]    y = h [kJ/kg]

A leg sampled with N intervals gives N + 1 points whose first and last
points are the exact projections of its start and end states. A full
diagram joins the legs without repeating shared vertices and finishes on
state 1, so a cycle of L legs has L·N + 1 points.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Iterator

import numpy as np
from scipy.integrate import trapezoid

from thermoviz.core.fluids import FluidProperties
from thermoviz.core.states import ThermodynamicState
from thermoviz.cycle.aggregator import ThermodynamicCycle
from thermoviz.cycle.processes import ProcessType, ThermodynamicProcess, infer_polytropic_index
from thermoviz.utils.constants import P_REF, T_REF


class DiagramType(Enum):
    """Property diagram."""

    PV = "pv"
    TS = "ts"
    PH = "ph"
    HS = "hs"

    @property
    def axis_labels(self) -> tuple[str, str]:
        return _AXIS_LABELS[self]

    @property
    def title(self) -> str:
        return _TITLES[self]


_AXIS_LABELS = {
    DiagramType.PV: ("Specific volume v [m³/kg]", "Pressure P [kPa]"),
    DiagramType.TS: ("Specific entropy s [kJ/(kg·K)]", "Temperature T [K]"),
    DiagramType.PH: ("Specific enthalpy h [kJ/kg]", "Pressure P [kPa]"),
    DiagramType.HS: ("Specific entropy s [kJ/(kg·K)]", "Specific enthalpy h [kJ/kg]"),
}

_TITLES = {
    DiagramType.PV: "P-v Diagram",
    DiagramType.TS: "T-s Diagram",
    DiagramType.PH: "P-h Diagram",
    DiagramType.HS: "h-s (Mollier) Diagram",
}


@dataclass(frozen=True)
class ChartPoint:
    """One plotted point. Vertices carry the name of their state."""

    x: float
    y: float
    state: str | None = None


def parse_diagram_type(value: str | DiagramType) -> DiagramType:
    """Accept a DiagramType or its string value (case-insensitive)."""
    if isinstance(value, DiagramType):
        return value
    try:
        return DiagramType(value.strip().lower())
    except ValueError:
        valid = ", ".join(d.value for d in DiagramType)
        raise ValueError(f"Unknown diagram type '{value}'. Valid types: {valid}") from None


# --- Projection ---


def _project_state(state: ThermodynamicState, diagram_type: DiagramType) -> tuple[float, float]:
    if diagram_type is DiagramType.PV:
        return state.volume, state.pressure
    if diagram_type is DiagramType.TS:
        return state.entropy, state.temperature
    if diagram_type is DiagramType.PH:
        return state.enthalpy, state.pressure
    return state.entropy, state.enthalpy


def _project(
    v: float,
    P: float,
    diagram_type: DiagramType,
    fluid: FluidProperties,
    T_ref: float,
    P_ref: float,
) -> tuple[float, float]:
    if diagram_type is DiagramType.PV:
        return v, P
    T = P * v / fluid.R
    if diagram_type is DiagramType.PH:
        return fluid.cp * T, P
    s = fluid.cp * math.log(T / T_ref) - fluid.R * math.log(P / P_ref)
    if diagram_type is DiagramType.TS:
        return s, T
    return s, fluid.cp * T


# --- Leg curves ---


def _leg_exponent(process: ThermodynamicProcess, fluid: FluidProperties) -> float | None:
    """Exponent n of P·v^n = const along the leg, None for isochoric legs."""
    if process.type is ProcessType.ISOCHORIC:
        return None
    if process.type is ProcessType.ISOBARIC:
        return 0.0
    if process.type is ProcessType.ISOTHERMAL:
        return 1.0
    if process.type is ProcessType.ISENTROPIC:
        return fluid.gamma
    if process.polytropic_index is not None:
        return process.polytropic_index
    if math.isclose(process.start_state.volume, process.end_state.volume):
        return None
    return infer_polytropic_index(process.start_state, process.end_state)


def _leg_pv(process: ThermodynamicProcess, fluid: FluidProperties, t: float) -> tuple[float, float]:
    """Point at fraction *t* of the way along a leg, as (v, P)."""
    start, end = process.start_state, process.end_state
    n = _leg_exponent(process, fluid)
    if n is None:
        return start.volume, start.pressure + t * (end.pressure - start.pressure)
    if n == 0.0:
        return start.volume + t * (end.volume - start.volume), start.pressure
    # Geometric spacing in v keeps samples even along the curve
    v = start.volume * (end.volume / start.volume) ** t
    return v, start.pressure * (start.volume / v) ** n


def iter_leg_points(
    process: ThermodynamicProcess,
    diagram_type: DiagramType,
    samples_per_leg: int,
    fluid: FluidProperties,
    T_ref: float = T_REF,
    P_ref: float = P_REF,
) -> Iterator[ChartPoint]:
    """Yield the samples_per_leg + 1 points of one leg, endpoints included."""
    if samples_per_leg < 1:
        raise ValueError(f"samples_per_leg must be at least 1, got {samples_per_leg}")

    start, end = process.start_state, process.end_state
    yield ChartPoint(*_project_state(start, diagram_type), state=start.name)
    for i in range(1, samples_per_leg):
        v, P = _leg_pv(process, fluid, i / samples_per_leg)
        yield ChartPoint(*_project(v, P, diagram_type, fluid, T_ref, P_ref))
    yield ChartPoint(*_project_state(end, diagram_type), state=end.name)


class DiagramSeries:
    """Sampled diagram of one cycle.

    Iterating starts a fresh pass over the legs each time. The full point
    list is built on first use of :attr:`points` and kept afterwards.
    """

    def __init__(
        self,
        cycle: ThermodynamicCycle,
        diagram_type: DiagramType,
        samples_per_leg: int = 20,
        T_ref: float = T_REF,
        P_ref: float = P_REF,
    ):
        if samples_per_leg < 1:
            raise ValueError(f"samples_per_leg must be at least 1, got {samples_per_leg}")
        self.cycle = cycle
        self.diagram_type = diagram_type
        self.samples_per_leg = samples_per_leg
        self._T_ref = T_ref
        self._P_ref = P_ref

    def legs(self) -> Iterator[Iterator[ChartPoint]]:
        """One point iterator per process leg."""
        for process in self.cycle.processes:
            yield iter_leg_points(
                process,
                self.diagram_type,
                self.samples_per_leg,
                self.cycle.fluid,
                self._T_ref,
                self._P_ref,
            )

    def __iter__(self) -> Iterator[ChartPoint]:
        for index, leg in enumerate(self.legs()):
            if index > 0:
                next(leg)  # shared vertex, already emitted
            yield from leg

    def __len__(self) -> int:
        return len(self.cycle.processes) * self.samples_per_leg + 1

    def __getitem__(self, index: int) -> ChartPoint:
        return self.points[index]

    @cached_property
    def points(self) -> tuple[ChartPoint, ...]:
        return tuple(self)

    @property
    def vertices(self) -> list[ChartPoint]:
        """Labelled points only (the states, state 1 twice)."""
        return [p for p in self.points if p.state is not None]

    def to_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        """x and y coordinates as numpy arrays."""
        x = np.fromiter((p.x for p in self.points), dtype=float, count=len(self))
        y = np.fromiter((p.y for p in self.points), dtype=float, count=len(self))
        return x, y

    def __repr__(self) -> str:
        return (
            f"DiagramSeries({self.cycle.type.value}, {self.diagram_type.value}, "
            f"{len(self)} points)"
        )


def sample_diagram(
    cycle: ThermodynamicCycle,
    diagram_type: DiagramType | str,
    samples_per_leg: int = 20,
    T_ref: float = T_REF,
    P_ref: float = P_REF,
) -> DiagramSeries:
    """Sample a diagram of a computed cycle.

    T_ref and P_ref must be the entropy references the cycle's states were
    computed with.
    """
    return DiagramSeries(cycle, parse_diagram_type(diagram_type), samples_per_leg, T_ref, P_ref)


def enclosed_area(series: DiagramSeries) -> float:
    """Signed line integral ∮ y dx around the sampled loop.

    Positive for clockwise loops. On PV and TS axes this equals the net
    work of the cycle (negative for refrigeration).
    """
    x, y = series.to_arrays()
    return float(trapezoid(y, x))
