"""Thermodynamic state points and ideal-gas property relations.

All states are evaluated with the ideal-gas model:

    v = R·T / P
    h = cp·T
    u = cv·T
    s = cp·ln(T / T_ref) − R·ln(P / P_ref)

with T in K, P in kPa, v in m³/kg, h and u in kJ/kg and s in kJ/(kg·K).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from thermoviz.core.errors import InvalidParameter
from thermoviz.core.fluids import FluidProperties
from thermoviz.utils.constants import (
    ANTOINE_A,
    ANTOINE_B,
    ANTOINE_C,
    KPA_TO_MMHG,
    MMHG_TO_KPA,
    P_REF,
    T_CELSIUS_OFFSET,
    T_REF,
)


@dataclass(frozen=True)
class ThermodynamicState:
    """Immutable state point of one cycle evaluation."""

    id: str
    name: str
    temperature: float  # K
    pressure: float  # kPa
    volume: float  # m³/kg
    enthalpy: float  # kJ/kg
    entropy: float  # kJ/(kg·K)
    internal_energy: float  # kJ/kg


def ideal_gas_state(
    state_id: str,
    name: str,
    T: float,
    P: float,
    fluid: FluidProperties,
    T_ref: float = T_REF,
    P_ref: float = P_REF,
) -> ThermodynamicState:
    """Build a state from temperature and pressure.

    Raises:
        InvalidParameter: If T or P is not a positive finite number, or a
            derived property is not finite.
    """
    if not (math.isfinite(T) and T > 0):
        raise InvalidParameter(f"T{state_id}", T, "temperature must be a positive finite value")
    if not (math.isfinite(P) and P > 0):
        raise InvalidParameter(f"P{state_id}", P, "pressure must be a positive finite value")

    v = fluid.R * T / P
    s = fluid.cp * math.log(T / T_ref) - fluid.R * math.log(P / P_ref)
    if not (math.isfinite(v) and math.isfinite(s)):
        raise InvalidParameter(f"state {state_id}", (T, P), "properties are not finite")

    return ThermodynamicState(
        id=state_id,
        name=name,
        temperature=T,
        pressure=P,
        volume=v,
        enthalpy=fluid.cp * T,
        entropy=s,
        internal_energy=fluid.cv * T,
    )


def gibbs_free_energy(state: ThermodynamicState) -> float:
    """Specific Gibbs free energy g = h − T·s [kJ/kg]."""
    return state.enthalpy - state.temperature * state.entropy


def helmholtz_free_energy(state: ThermodynamicState) -> float:
    """Specific Helmholtz free energy a = u − T·s [kJ/kg]."""
    return state.internal_energy - state.temperature * state.entropy


def flow_exergy(
    state: ThermodynamicState,
    fluid: FluidProperties,
    T0: float = T_REF,
    P0: float = P_REF,
) -> float:
    """Physical flow exergy ψ = (h − h0) − T0·(s − s0) relative to the dead state.

    Clamped at zero.
    """
    dead = ideal_gas_state("0", "Dead state", T0, P0, fluid, T_ref=T0, P_ref=P0)
    psi = (state.enthalpy - dead.enthalpy) - T0 * (state.entropy - dead.entropy)
    return max(0.0, psi)


# --- Saturation (water) ---


def saturation_temperature(P: float) -> float:
    """Approximate saturation temperature of water [K] at pressure P [kPa].

    Uses the Antoine equation; adequate between roughly 1 and 22 000 kPa.
    """
    if not (math.isfinite(P) and P > 0):
        raise InvalidParameter("pressure", P, "saturation pressure must be positive")
    log_p = math.log10(P * KPA_TO_MMHG)
    if log_p >= ANTOINE_A:
        raise InvalidParameter("pressure", P, "outside the range of the saturation correlation")
    return ANTOINE_B / (ANTOINE_A - log_p) - ANTOINE_C + T_CELSIUS_OFFSET


def saturation_pressure(T: float) -> float:
    """Approximate saturation pressure of water [kPa] at temperature T [K]."""
    t_c = T - T_CELSIUS_OFFSET
    return 10.0 ** (ANTOINE_A - ANTOINE_B / (ANTOINE_C + t_c)) * MMHG_TO_KPA
