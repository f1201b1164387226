"""Cycle aggregation and performance metrics.

Assembles solved states and evaluated processes into a ThermodynamicCycle
and derives heat in/out, net work and efficiency, plus the optional
second-law and free-energy figures.
"""

from __future__ import annotations

import hashlib
import logging
import math
from dataclasses import dataclass
from typing import Sequence

from thermoviz.core.config import EngineSettings
from thermoviz.core.errors import DegenerateCycle, InvalidParameter
from thermoviz.core.fluids import FluidProperties
from thermoviz.core.states import (
    ThermodynamicState,
    flow_exergy,
    gibbs_free_energy,
    helmholtz_free_energy,
)
from thermoviz.cycle.parameters import CycleType, SimulationConfig
from thermoviz.cycle.processes import ProcessType, ThermodynamicProcess, evaluate_process
from thermoviz.cycle.solver import solve_states
from thermoviz.utils.cache import make_key
from thermoviz.utils.constants import P_REF, T_REF, TROUTON_FACTOR

logger = logging.getLogger(__name__)

# Heat input below this magnitude [kJ/kg] is treated as zero
_HEAT_EPS = 1e-9

# First-law residual above this fraction of heat input is reported
_RESIDUAL_TOL = 1e-3


@dataclass(frozen=True)
class ThermodynamicCycle:
    """Complete result of one cycle evaluation.

    ``efficiency`` is the thermal efficiency (fraction, not percent) of a
    power cycle and the coefficient of performance of a refrigeration
    cycle. Extended metrics are ``None`` unless they were requested.
    """

    id: str
    name: str
    type: CycleType
    fluid: FluidProperties
    states: tuple[ThermodynamicState, ...]
    processes: tuple[ThermodynamicProcess, ...]
    efficiency: float
    net_work: float  # kJ/kg
    heat_in: float  # kJ/kg
    heat_out: float  # kJ/kg
    first_law_residual: float = 0.0  # kJ/kg, Σ work − net work
    entropy_generation: float | None = None  # kJ/(kg·K)
    exergy: float | None = None  # kJ/kg
    quality: float | None = None
    gibbs_free_energy: float | None = None  # kJ/kg
    helmholtz_free_energy: float | None = None  # kJ/kg

    @property
    def is_refrigeration(self) -> bool:
        return self.type == CycleType.REFRIGERATION

    @property
    def total_entropy_change(self) -> float:
        return sum(p.entropy_change for p in self.processes)

    @property
    def hottest_state(self) -> ThermodynamicState:
        return max(self.states, key=lambda s: s.temperature)

    @property
    def coldest_state(self) -> ThermodynamicState:
        return min(self.states, key=lambda s: s.temperature)


def aggregate_cycle(
    cycle_id: str,
    name: str,
    cycle_type: CycleType,
    fluid: FluidProperties,
    states: Sequence[ThermodynamicState],
    processes: Sequence[ThermodynamicProcess],
    extended: bool = False,
    T0: float = T_REF,
    P0: float = P_REF,
) -> ThermodynamicCycle:
    """Assemble a cycle and compute its performance.

    Args:
        cycle_id: Identifier of the result.
        name: Display name.
        cycle_type: Cycle variant.
        fluid: Working fluid constants.
        states: Ordered vertex states.
        processes: One process per consecutive pair of states, the last one
            closing the cycle.
        extended: Also compute entropy generation, exergy, quality and the
            free energies.
        T0: Dead-state temperature for exergy [K].
        P0: Dead-state pressure for exergy [kPa].

    Raises:
        DegenerateCycle: If the cycle receives no heat.
        InvalidParameter: If a computed metric is not finite.
    """
    if len(processes) != len(states):
        raise ValueError(f"{len(states)} states need {len(states)} processes, got {len(processes)}")

    heat_in = sum(p.heat for p in processes if p.heat > 0)
    heat_out = -sum(p.heat for p in processes if p.heat < 0)
    if heat_in <= _HEAT_EPS:
        raise DegenerateCycle(f"{name} receives no heat (heat in = {heat_in:.3g} kJ/kg)")

    net_work = heat_in - heat_out
    residual = sum(p.work for p in processes) - net_work
    if abs(residual) > _RESIDUAL_TOL * heat_in:
        logger.warning(
            "%s: first-law residual %.3g kJ/kg (fluid constants not exactly consistent)",
            name, residual,
        )

    if cycle_type == CycleType.REFRIGERATION:
        if abs(net_work) <= _HEAT_EPS:
            raise DegenerateCycle(f"{name} requires no work input")
        efficiency = heat_in / abs(net_work)
    else:
        efficiency = net_work / heat_in

    if not math.isfinite(efficiency):
        raise InvalidParameter("efficiency", efficiency, "cycle performance is not finite")

    cycle = ThermodynamicCycle(
        id=cycle_id,
        name=name,
        type=cycle_type,
        fluid=fluid,
        states=tuple(states),
        processes=tuple(processes),
        efficiency=efficiency,
        net_work=net_work,
        heat_in=heat_in,
        heat_out=heat_out,
        first_law_residual=residual,
    )
    if not extended:
        return cycle

    peak = cycle.hottest_state
    return ThermodynamicCycle(
        **{
            **cycle.__dict__,
            "entropy_generation": entropy_generation(cycle),
            "exergy": flow_exergy(peak, fluid, T0, P0),
            "quality": vapour_quality(cycle),
            "gibbs_free_energy": gibbs_free_energy(peak),
            "helmholtz_free_energy": helmholtz_free_energy(peak),
        }
    )


# --- Extended metrics ---


def entropy_generation(cycle: ThermodynamicCycle) -> float:
    """Entropy generated by heat exchange with two reservoirs [kJ/(kg·K)].

    Heat is drawn from a source at the hottest cycle temperature and
    rejected to a sink at the coldest (the reverse for refrigeration).
    The working fluid returns to its initial state, so the generation is
    −Σ q / T_reservoir. A Carnot cycle generates none.
    """
    t_hot = cycle.hottest_state.temperature
    t_cold = cycle.coldest_state.temperature
    if cycle.is_refrigeration:
        t_source, t_sink = t_cold, t_hot
    else:
        t_source, t_sink = t_hot, t_cold
    s_gen = cycle.heat_out / t_sink - cycle.heat_in / t_source
    # Round-off around the reversible limit
    return max(0.0, s_gen)


def latent_heat(fluid: FluidProperties, T_sat: float) -> float:
    """Latent heat of vaporisation from Trouton's rule, h_fg ≈ 10.5·R·T_sat [kJ/kg]."""
    return TROUTON_FACTOR * fluid.R * T_sat


def vapour_quality(cycle: ThermodynamicCycle) -> float | None:
    """Vapour quality at the two-phase state of a vapour cycle.

    Lever rule on the isothermal phase-change leg: the condenser of a
    Rankine cycle turns the turbine exhaust (quality x) into saturated
    liquid by rejecting x·h_fg; the evaporator of a refrigeration cycle
    turns the throttled mixture (quality x) into saturated vapour by
    absorbing (1 − x)·h_fg. Returns None for gas cycles.
    """
    if cycle.type not in (CycleType.RANKINE, CycleType.REFRIGERATION):
        return None
    # Condenser (Rankine) or evaporator (refrigeration)
    phase_change = [p for p in cycle.processes if p.type is ProcessType.ISOTHERMAL][-1]
    h_fg = latent_heat(cycle.fluid, phase_change.start_state.temperature)
    if cycle.type == CycleType.RANKINE:
        x = -phase_change.heat / h_fg
    else:
        x = 1.0 - phase_change.heat / h_fg
    return min(1.0, max(0.0, x))


# --- Full pipeline ---


def cycle_key(config: SimulationConfig, extended: bool = False) -> str:
    """Stable cache key of a cycle computation."""
    return make_key(*config.key_parts(), extended)


def cycle_id_for(config: SimulationConfig, extended: bool = False) -> str:
    """Deterministic cycle identifier derived from the configuration."""
    return hashlib.sha1(cycle_key(config, extended).encode()).hexdigest()[:12]


def solve_cycle(
    config: SimulationConfig,
    extended: bool = False,
    settings: EngineSettings | None = None,
) -> ThermodynamicCycle:
    """Run state solver, process evaluator and aggregator for a configuration.

    No caching happens here; see CycleEngine for the memoized entry point.
    """
    settings = settings or EngineSettings()
    T_ref = settings.reference_temperature
    P_ref = settings.reference_pressure
    topology = solve_states(config.cycle_type, config.fluid, config.parameters, T_ref, P_ref)
    try:
        processes = tuple(
            evaluate_process(
                start,
                end,
                leg.type,
                config.fluid,
                polytropic_index=leg.polytropic_index,
                tolerance=settings.tolerance,
                name=leg.name,
            )
            for start, end, leg in topology.pairs()
        )
        return aggregate_cycle(
            cycle_id_for(config, extended),
            config.cycle_type.label,
            config.cycle_type,
            config.fluid,
            topology.states,
            processes,
            extended=extended,
            T0=T_ref,
            P0=P_ref,
        )
    except (OverflowError, ZeroDivisionError) as exc:
        raise InvalidParameter(
            config.cycle_type.value,
            config.parameters.to_mapping(),
            f"numeric overflow while evaluating processes: {exc}",
        ) from exc
