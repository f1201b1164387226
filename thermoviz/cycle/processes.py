"""Process-leg evaluation.

Given two adjacent states and the process that connects them, compute the
specific work done by the gas, the heat added to it and its entropy change
(all per kg, work and heat positive when done by / added to the gas):

    isentropic   q = 0           w = −Δu                  Δs = 0
    isochoric    q = Δu          w = 0                    Δs = cv·ln(T2/T1)
    isobaric     q = Δh          w = P·Δv                 Δs = cp·ln(T2/T1)
    isothermal   q = w           w = R·T·ln(v2/v1)        Δs = R·ln(v2/v1)
    polytropic   q = Δu + w      w = (P1v1 − P2v2)/(n−1)  Δs = cv·ln(T2/T1) + R·ln(v2/v1)
    adiabatic    q = 0           w = −Δu                  Δs = cp·ln(T2/T1) − R·ln(P2/P1) ≥ 0

A polytropic leg with n = 1 falls back to the isothermal work expression.
An adiabatic leg is an irreversible compression or expansion (a pump,
turbine or compressor with an isentropic efficiency below 1); it may only
raise the entropy.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from thermoviz.core.errors import InvalidLeg
from thermoviz.core.fluids import FluidProperties
from thermoviz.core.states import ThermodynamicState

# Relative tolerance used to decide n == 1 for polytropic legs
_UNIT_INDEX_TOL = 1e-9


class ProcessType(Enum):
    """Governing relation of a process leg."""

    ISOTHERMAL = "isothermal"
    ISOBARIC = "isobaric"
    ISOCHORIC = "isochoric"
    ISENTROPIC = "isentropic"
    POLYTROPIC = "polytropic"
    ADIABATIC = "adiabatic"


@dataclass(frozen=True)
class ThermodynamicProcess:
    """One leg of a cycle between two of its states."""

    id: str
    name: str
    type: ProcessType
    start_state: ThermodynamicState
    end_state: ThermodynamicState
    work: float  # kJ/kg
    heat: float  # kJ/kg
    entropy_change: float  # kJ/(kg·K)
    polytropic_index: float | None = None

    @property
    def internal_energy_change(self) -> float:
        return self.end_state.internal_energy - self.start_state.internal_energy


def _relative_gap(a: float, b: float) -> float:
    scale = max(abs(a), abs(b))
    return abs(a - b) / scale if scale > 0 else 0.0


def _require_equal(
    process_type: ProcessType, quantity: str, a: float, b: float, tolerance: float
) -> None:
    gap = _relative_gap(a, b)
    if gap > tolerance:
        raise InvalidLeg(
            process_type.value,
            f"{quantity} changes from {a:.6g} to {b:.6g} (relative gap {gap:.2e})",
        )


def adiabatic_entropy_change(
    start: ThermodynamicState, end: ThermodynamicState, fluid: FluidProperties
) -> float:
    return fluid.cp * math.log(end.temperature / start.temperature) - fluid.R * math.log(
        end.pressure / start.pressure
    )


def infer_polytropic_index(start: ThermodynamicState, end: ThermodynamicState) -> float:
    """Index n of P·v^n = const through two states."""
    if math.isclose(start.volume, end.volume):
        raise InvalidLeg("polytropic", "volumes are equal, the index is undefined")
    return math.log(end.pressure / start.pressure) / math.log(start.volume / end.volume)


def check_leg(
    start: ThermodynamicState,
    end: ThermodynamicState,
    process_type: ProcessType,
    fluid: FluidProperties,
    polytropic_index: float | None = None,
    tolerance: float = 1e-6,
) -> None:
    """Verify that two states can be joined by the given process.

    Raises:
        InvalidLeg: If the invariant of the process differs between the
            two states by more than *tolerance* (relative).
    """
    if process_type is ProcessType.ISOCHORIC:
        _require_equal(process_type, "volume", start.volume, end.volume, tolerance)
    elif process_type is ProcessType.ISOBARIC:
        _require_equal(process_type, "pressure", start.pressure, end.pressure, tolerance)
    elif process_type is ProcessType.ISOTHERMAL:
        _require_equal(process_type, "temperature", start.temperature, end.temperature, tolerance)
    elif process_type is ProcessType.ISENTROPIC:
        g = fluid.gamma
        _require_equal(
            process_type, "P·v^γ",
            start.pressure * start.volume**g, end.pressure * end.volume**g, tolerance,
        )
    elif process_type is ProcessType.ADIABATIC:
        ds = adiabatic_entropy_change(start, end, fluid)
        if ds < -tolerance * fluid.cp:
            raise InvalidLeg(
                process_type.value, f"entropy decreases by {-ds:.6g} kJ/(kg·K) without heat transfer"
            )
    elif polytropic_index is not None:
        n = polytropic_index
        _require_equal(
            process_type, "P·v^n",
            start.pressure * start.volume**n, end.pressure * end.volume**n, tolerance,
        )


def evaluate_process(
    start: ThermodynamicState,
    end: ThermodynamicState,
    process_type: ProcessType,
    fluid: FluidProperties,
    polytropic_index: float | None = None,
    tolerance: float = 1e-6,
    process_id: str = "",
    name: str = "",
) -> ThermodynamicProcess:
    """Compute work, heat and entropy change of a process leg.

    Args:
        start: State at the beginning of the leg.
        end: State at the end of the leg.
        process_type: Governing relation.
        fluid: Working fluid constants.
        polytropic_index: Index n for polytropic legs. Inferred from the
            two states when omitted.
        tolerance: Relative tolerance of the consistency check.
        process_id: Identifier, defaults to ``"<start>-<end>"``.
        name: Display name, defaults to the process type.

    Returns:
        ThermodynamicProcess referencing *start* and *end*.

    Raises:
        InvalidLeg: If the states are inconsistent with the process type.
    """
    check_leg(start, end, process_type, fluid, polytropic_index, tolerance)

    du = end.internal_energy - start.internal_energy
    n = None

    if process_type is ProcessType.ISENTROPIC:
        heat = 0.0
        work = -du
        ds = 0.0
    elif process_type is ProcessType.ISOCHORIC:
        work = 0.0
        heat = du
        ds = fluid.cv * math.log(end.temperature / start.temperature)
    elif process_type is ProcessType.ISOBARIC:
        work = start.pressure * (end.volume - start.volume)
        heat = end.enthalpy - start.enthalpy
        ds = fluid.cp * math.log(end.temperature / start.temperature)
    elif process_type is ProcessType.ADIABATIC:
        heat = 0.0
        work = -du
        ds = adiabatic_entropy_change(start, end, fluid)
    elif process_type is ProcessType.ISOTHERMAL:
        ratio = math.log(end.volume / start.volume)
        work = fluid.R * start.temperature * ratio
        heat = work
        ds = fluid.R * ratio
    else:
        n = polytropic_index if polytropic_index is not None else infer_polytropic_index(start, end)
        p1v1 = start.pressure * start.volume
        p2v2 = end.pressure * end.volume
        if abs(n - 1.0) <= _UNIT_INDEX_TOL:
            work = p1v1 * math.log(end.volume / start.volume)
        else:
            work = (p1v1 - p2v2) / (n - 1.0)
        heat = du + work
        ds = fluid.cv * math.log(end.temperature / start.temperature) + fluid.R * math.log(
            end.volume / start.volume
        )

    return ThermodynamicProcess(
        id=process_id or f"{start.id}-{end.id}",
        name=name or f"{process_type.value.title()} {start.id}→{end.id}",
        type=process_type,
        start_state=start,
        end_state=end,
        work=work,
        heat=heat,
        entropy_change=ds,
        polytropic_index=n,
    )
