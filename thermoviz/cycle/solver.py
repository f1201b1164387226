"""State solver for the standard thermodynamic cycles.

Derives the ordered vertex states of a cycle (1 → 2 → … → back to 1, four states for the ideal cycles)
from its validated parameters using closed-form ideal-gas relations, and
records which process joins each pair of consecutive states.

Supported cycles:
- Otto: compression, isochoric heat addition, expansion, isochoric rejection
- Diesel: compression, isobaric heat addition, expansion, isochoric rejection
- Brayton: compression, isobaric heat addition, expansion, isobaric rejection
- Carnot: two isentropes between two isotherms
- Rankine: ideal-gas approximation of the steam cycle
- Refrigeration: ideal-gas approximation of vapour compression

Rankine and refrigeration do not use saturation tables. The phase-change
legs (boiling, condensing, evaporating) happen at constant temperature, so
they are represented by isotherms or by heating to the saturation
temperature, with the fluid otherwise treated as an ideal gas. Temperatures
follow the inputs; state pressures are the ideal-gas pressures consistent
with those temperatures and therefore differ from real steam pressures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from thermoviz.core.errors import InvalidParameter
from thermoviz.core.fluids import FluidProperties
from thermoviz.core.states import ThermodynamicState, ideal_gas_state, saturation_temperature
from thermoviz.cycle.parameters import (
    AnyCycleParameters,
    BraytonParameters,
    CarnotParameters,
    CycleType,
    DieselParameters,
    OttoParameters,
    RankineParameters,
    RefrigerationParameters,
)
from thermoviz.cycle.processes import ProcessType
from thermoviz.utils.constants import P_REF, T_REF

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LegSpec:
    """Process joining state i to state i + 1 (the last leg closes the cycle)."""

    type: ProcessType
    name: str
    polytropic_index: float | None = None


@dataclass(frozen=True)
class CycleTopology:
    """Ordered states of a cycle and the legs between them."""

    cycle_type: CycleType
    states: tuple[ThermodynamicState, ...]
    legs: tuple[LegSpec, ...]

    def __post_init__(self) -> None:
        if len(self.states) != len(self.legs):
            raise ValueError(
                f"{len(self.states)} states need {len(self.states)} legs, got {len(self.legs)}"
            )

    def pairs(self):
        """Yield (start, end, leg) for every leg, closing back to the first state."""
        n = len(self.states)
        for i, leg in enumerate(self.legs):
            yield self.states[i], self.states[(i + 1) % n], leg


class _StateFactory:
    """Builds numbered ideal-gas states for one cycle evaluation."""

    def __init__(self, fluid: FluidProperties, T_ref: float, P_ref: float):
        self.fluid = fluid
        self.T_ref = T_ref
        self.P_ref = P_ref

    def __call__(self, index: int, name: str, T: float, P: float) -> ThermodynamicState:
        return ideal_gas_state(str(index), name, T, P, self.fluid, self.T_ref, self.P_ref)


def solve_states(
    cycle_type: CycleType,
    fluid: FluidProperties,
    parameters: AnyCycleParameters,
    T_ref: float = T_REF,
    P_ref: float = P_REF,
) -> CycleTopology:
    """Compute the vertex states of a cycle.

    Args:
        cycle_type: Cycle variant.
        fluid: Working fluid constants.
        parameters: Validated parameter set matching *cycle_type*.
        T_ref: Entropy reference temperature [K].
        P_ref: Entropy reference pressure [kPa].

    Returns:
        CycleTopology with the states in standard numbering.

    Raises:
        InvalidParameter: If the parameters lead to a non-physical state.
    """
    if parameters.cycle_type is not cycle_type:
        raise ValueError(
            f"{type(parameters).__name__} cannot configure a {cycle_type.value} cycle"
        )
    make = _StateFactory(fluid, T_ref, P_ref)

    try:
        if cycle_type == CycleType.OTTO:
            topology = _solve_otto(parameters, fluid, make)
        elif cycle_type == CycleType.DIESEL:
            topology = _solve_diesel(parameters, fluid, make)
        elif cycle_type == CycleType.BRAYTON:
            topology = _solve_brayton(parameters, fluid, make)
        elif cycle_type == CycleType.CARNOT:
            topology = _solve_carnot(parameters, fluid, make)
        elif cycle_type == CycleType.RANKINE:
            topology = _solve_rankine(parameters, fluid, make)
        elif cycle_type == CycleType.REFRIGERATION:
            topology = _solve_refrigeration(parameters, fluid, make)
        else:
            raise ValueError(f"Unknown cycle type: {cycle_type}")
    except (OverflowError, ZeroDivisionError) as exc:
        raise InvalidParameter(
            cycle_type.value, parameters.to_mapping(), f"numeric overflow while solving states: {exc}"
        ) from exc

    for state in topology.states:
        logger.debug(
            "%s state %s: T=%.2f K P=%.3f kPa v=%.5f m3/kg",
            cycle_type.value, state.id, state.temperature, state.pressure, state.volume,
        )
    return topology


def _compression_legs(n: float | None, compression: str, expansion: str) -> tuple[LegSpec, LegSpec]:
    """Compression and expansion legs: isentropic, or polytropic when n is given."""
    if n is None:
        return (
            LegSpec(ProcessType.ISENTROPIC, f"Isentropic {compression}"),
            LegSpec(ProcessType.ISENTROPIC, f"Isentropic {expansion}"),
        )
    return (
        LegSpec(ProcessType.POLYTROPIC, f"Polytropic {compression}", n),
        LegSpec(ProcessType.POLYTROPIC, f"Polytropic {expansion}", n),
    )


# --- Otto cycle ---


def _solve_otto(p: OttoParameters, fluid: FluidProperties, make: _StateFactory) -> CycleTopology:
    """Otto cycle: 1→2 compression, 2→3 v = const, 3→4 expansion, 4→1 v = const."""
    n = p.polytropic_index if p.polytropic_index is not None else fluid.gamma
    r = p.compression_ratio

    s1 = make(1, "State 1", p.T1, p.P1)
    T2 = p.T1 * r ** (n - 1.0)
    s2 = make(2, "State 2", T2, p.P1 * r**n)
    T3 = T2 + p.heat_addition / fluid.cv
    s3 = make(3, "State 3", T3, s2.pressure * T3 / T2)
    s4 = make(4, "State 4", T3 * r ** (1.0 - n), s3.pressure * r**-n)

    compress, expand = _compression_legs(p.polytropic_index, "Compression", "Expansion")
    legs = (
        compress,
        LegSpec(ProcessType.ISOCHORIC, "Constant-Volume Heat Addition"),
        expand,
        LegSpec(ProcessType.ISOCHORIC, "Constant-Volume Heat Rejection"),
    )
    return CycleTopology(CycleType.OTTO, (s1, s2, s3, s4), legs)


# --- Diesel cycle ---


def _solve_diesel(p: DieselParameters, fluid: FluidProperties, make: _StateFactory) -> CycleTopology:
    """Diesel cycle: 1→2 compression, 2→3 P = const, 3→4 expansion, 4→1 v = const."""
    n = p.polytropic_index if p.polytropic_index is not None else fluid.gamma
    r = p.compression_ratio
    rc = p.cutoff_ratio
    re = r / rc  # expansion ratio v4 / v3

    s1 = make(1, "State 1", p.T1, p.P1)
    T2 = p.T1 * r ** (n - 1.0)
    s2 = make(2, "State 2", T2, p.P1 * r**n)
    T3 = T2 * rc
    s3 = make(3, "State 3", T3, s2.pressure)
    s4 = make(4, "State 4", T3 * re ** (1.0 - n), s3.pressure * re**-n)

    compress, expand = _compression_legs(p.polytropic_index, "Compression", "Expansion")
    legs = (
        compress,
        LegSpec(ProcessType.ISOBARIC, "Constant-Pressure Heat Addition"),
        expand,
        LegSpec(ProcessType.ISOCHORIC, "Constant-Volume Heat Rejection"),
    )
    return CycleTopology(CycleType.DIESEL, (s1, s2, s3, s4), legs)


# --- Brayton cycle ---


def _solve_brayton(p: BraytonParameters, fluid: FluidProperties, make: _StateFactory) -> CycleTopology:
    """Brayton cycle: 1→2 compressor, 2→3 combustor, 3→4 turbine, 4→1 exhaust."""
    n = p.polytropic_index if p.polytropic_index is not None else fluid.gamma
    rp = p.pressure_ratio
    exponent = (n - 1.0) / n

    s1 = make(1, "Compressor Inlet", p.T1, p.P1)
    T2 = p.T1 * rp**exponent
    if p.T3 <= T2:
        raise InvalidParameter(
            "T3", p.T3, f"turbine inlet temperature must exceed the compressor outlet {T2:.1f} K"
        )
    s2 = make(2, "Combustor Inlet", T2, p.P1 * rp)
    s3 = make(3, "Turbine Inlet", p.T3, s2.pressure)
    s4 = make(4, "Turbine Exit", p.T3 * rp**-exponent, p.P1)

    compress, expand = _compression_legs(p.polytropic_index, "Compression", "Expansion")
    legs = (
        compress,
        LegSpec(ProcessType.ISOBARIC, "Constant-Pressure Heat Addition"),
        expand,
        LegSpec(ProcessType.ISOBARIC, "Constant-Pressure Heat Rejection"),
    )
    return CycleTopology(CycleType.BRAYTON, (s1, s2, s3, s4), legs)


# --- Carnot cycle ---


def _solve_carnot(p: CarnotParameters, fluid: FluidProperties, make: _StateFactory) -> CycleTopology:
    """Carnot cycle between T1 (cold) and T3 (hot).

    States 1 and 3 sit on the reservoir temperatures; 2 and 4 are where the
    isentropes meet the isotherms.
    """
    k = fluid.gamma / (fluid.gamma - 1.0)
    rv = p.volume_ratio

    s1 = make(1, "State 1", p.T1, p.P1)
    s2 = make(2, "State 2", p.T3, p.P1 * (p.T3 / p.T1) ** k)
    s3 = make(3, "State 3", p.T3, s2.pressure / rv)
    s4 = make(4, "State 4", p.T1, p.P1 / rv)

    legs = (
        LegSpec(ProcessType.ISENTROPIC, "Isentropic Compression"),
        LegSpec(ProcessType.ISOTHERMAL, "Isothermal Heat Addition"),
        LegSpec(ProcessType.ISENTROPIC, "Isentropic Expansion"),
        LegSpec(ProcessType.ISOTHERMAL, "Isothermal Heat Rejection"),
    )
    return CycleTopology(CycleType.CARNOT, (s1, s2, s3, s4), legs)


# --- Rankine cycle (ideal-gas approximation) ---


def _adiabatic_outlet(T_in: float, T_ideal: float, efficiency: float, compressing: bool) -> float:
    """Outlet temperature of a machine with the given isentropic efficiency."""
    if efficiency == 1.0:
        return T_ideal
    if compressing:
        return T_in + (T_ideal - T_in) / efficiency
    return T_in - efficiency * (T_in - T_ideal)


def _machine_leg(efficiency: float, name: str) -> LegSpec:
    if efficiency < 1.0:
        return LegSpec(ProcessType.ADIABATIC, name)
    return LegSpec(ProcessType.ISENTROPIC, name)


def _solve_rankine(p: RankineParameters, fluid: FluidProperties, make: _StateFactory) -> CycleTopology:
    """Rankine cycle.

    1 condensate at T_sat(condenser), 2 at T_sat(boiler), 3 turbine inlet,
    4 turbine exhaust back at the condenser temperature. Condensation 4→1
    is isothermal. With a turbine efficiency below 1 the exhaust leaves
    hotter than T_sat(condenser) and an isobaric desuperheating leg runs to
    the saturated vapour state before condensation.
    """
    k = fluid.gamma / (fluid.gamma - 1.0)
    T_cond = saturation_temperature(p.condenser_pressure)
    T_boil = saturation_temperature(p.boiler_pressure)
    T3 = p.turbine_inlet_temp
    if T3 <= T_boil:
        raise InvalidParameter(
            "turbineInletTemp", T3, f"must exceed the boiler saturation temperature {T_boil:.1f} K"
        )

    T2 = _adiabatic_outlet(T_cond, T_boil, p.pump_efficiency, compressing=True)
    if T3 <= T2:
        raise InvalidParameter(
            "pumpEfficiency",
            p.pump_efficiency,
            f"pump outlet {T2:.1f} K reaches the turbine inlet temperature {T3:.1f} K",
        )
    T4 = _adiabatic_outlet(T3, T_cond, p.turbine_efficiency, compressing=False)

    s1 = make(1, "Condensate Exit", T_cond, p.condenser_pressure)
    s2 = make(2, "Boiler Inlet", T2, p.condenser_pressure * (T_boil / T_cond) ** k)
    s3 = make(3, "Turbine Inlet", T3, s2.pressure)
    P4 = s3.pressure * (T_cond / T3) ** k
    states = [s1, s2, s3]
    legs = [
        _machine_leg(p.pump_efficiency, "Pump"),
        LegSpec(ProcessType.ISOBARIC, "Boiler Heat Addition"),
        _machine_leg(p.turbine_efficiency, "Turbine Expansion"),
    ]
    if T4 > T_cond:
        states.append(make(4, "Turbine Exhaust", T4, P4))
        legs.append(LegSpec(ProcessType.ISOBARIC, "Desuperheating"))
    states.append(make(len(states) + 1, "Condenser Inlet", T_cond, P4))
    legs.append(LegSpec(ProcessType.ISOTHERMAL, "Condenser Heat Rejection"))
    return CycleTopology(CycleType.RANKINE, tuple(states), tuple(legs))


# --- Refrigeration cycle (ideal-gas approximation) ---


def _solve_refrigeration(
    p: RefrigerationParameters, fluid: FluidProperties, make: _StateFactory
) -> CycleTopology:
    """Vapour-compression refrigeration as a reversed Carnot cycle.

    Condensation and evaporation are isothermal at the condenser and
    evaporator temperatures; volumeRatio sets how far each isotherm runs.
    Superheat, subcooling and compressor losses add isobaric legs around
    the two isotherms:

        compressor → [desuperheating] → condenser → [subcooling]
        → expansion → evaporator → [superheating] → compressor inlet
    """
    k = fluid.gamma / (fluid.gamma - 1.0)
    rv = p.volume_ratio
    Te, Tc = p.evaporator_temp, p.condenser_temp
    T1 = Te + p.superheat
    T2s = T1 * Tc / Te if p.superheat > 0 else Tc
    T2 = _adiabatic_outlet(T1, T2s, p.compressor_efficiency, compressing=True)
    P2 = p.P1 * (Tc / Te) ** k

    states = [make(1, "Compressor Inlet", T1, p.P1)]
    legs = [_machine_leg(p.compressor_efficiency, "Compressor")]

    def add(name: str, T: float, P: float, leg: LegSpec) -> None:
        states.append(make(len(states) + 1, name, T, P))
        legs.append(leg)

    if T2 > Tc:
        add("Condenser Inlet", T2, P2, LegSpec(ProcessType.ISOBARIC, "Desuperheating"))
        add("Condenser Saturated Vapour", Tc, P2, LegSpec(ProcessType.ISOTHERMAL, "Condenser Heat Rejection"))
    else:
        add("Condenser Inlet", Tc, P2, LegSpec(ProcessType.ISOTHERMAL, "Condenser Heat Rejection"))

    P3 = P2 * rv
    Tx = Tc - p.subcool
    if p.subcool > 0:
        add("Condenser Saturated Liquid", Tc, P3, LegSpec(ProcessType.ISOBARIC, "Subcooling"))
    add("Expansion Valve Inlet", Tx, P3, LegSpec(ProcessType.ISENTROPIC, "Expansion"))
    add(
        "Evaporator Inlet", Te, P3 * (Te / Tx) ** k,
        LegSpec(ProcessType.ISOTHERMAL, "Evaporator Heat Absorption"),
    )
    if p.superheat > 0:
        add("Evaporator Outlet", Te, p.P1, LegSpec(ProcessType.ISOBARIC, "Superheating"))
    return CycleTopology(CycleType.REFRIGERATION, tuple(states), tuple(legs))
