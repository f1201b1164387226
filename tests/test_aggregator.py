"""Tests for cycle aggregation and performance metrics."""

import pytest

from thermoviz.core.config import EngineSettings
from thermoviz.core.errors import DegenerateCycle, InvalidParameter
from thermoviz.core.fluids import lookup
from thermoviz.core.presets import list_presets
from thermoviz.core.states import ideal_gas_state
from thermoviz.cycle.aggregator import aggregate_cycle, cycle_id_for, latent_heat, solve_cycle
from thermoviz.cycle.parameters import CycleType, SimulationConfig
from thermoviz.cycle.processes import ProcessType, evaluate_process

AIR = lookup("air")

OTTO = {"T1": 300, "P1": 100, "compressionRatio": 8}


def _cycle(cycle_type, params, fluid="air", extended=False):
    return solve_cycle(SimulationConfig.from_mapping(fluid, cycle_type, params), extended=extended)


class TestOtto:
    def test_efficiency(self):
        cycle = _cycle("otto", OTTO)
        assert cycle.efficiency == pytest.approx(1 - 8 ** (1 - 1.4), rel=1e-9)
        assert cycle.efficiency == pytest.approx(0.5647, abs=1e-4)

    def test_first_law_closure(self):
        cycle = _cycle("otto", OTTO)
        assert cycle.net_work == pytest.approx(cycle.heat_in - cycle.heat_out, rel=1e-6)
        assert cycle.first_law_residual == pytest.approx(0.0, abs=1e-6 * cycle.heat_in)
        assert cycle.heat_in == pytest.approx(1000.0)

    @pytest.mark.parametrize("r", [2.0, 5.0, 8.0, 12.0, 20.0])
    def test_first_law_over_compression_ratios(self, r):
        cycle = _cycle("otto", {"T1": 300, "P1": 100, "compressionRatio": r, "heatAddition": 1500})
        sum_work = sum(p.work for p in cycle.processes)
        assert sum_work == pytest.approx(cycle.net_work, rel=1e-6)

    def test_states_and_processes_shared(self):
        cycle = _cycle("otto", OTTO)
        assert len(cycle.states) == 4
        assert len(cycle.processes) == 4
        for i, proc in enumerate(cycle.processes):
            assert proc.start_state is cycle.states[i]
            assert proc.end_state is cycle.states[(i + 1) % 4]

    def test_extended_metrics_unset_by_default(self):
        cycle = _cycle("otto", OTTO)
        assert cycle.entropy_generation is None
        assert cycle.exergy is None
        assert cycle.gibbs_free_energy is None
        assert cycle.helmholtz_free_energy is None
        assert cycle.quality is None

    def test_extended_metrics(self):
        cycle = _cycle("otto", OTTO, extended=True)
        assert cycle.entropy_generation > 0
        assert cycle.exergy > 0
        assert cycle.gibbs_free_energy is not None
        assert cycle.helmholtz_free_energy is not None
        assert cycle.quality is None  # gas cycle

    def test_polytropic_otto_closes(self):
        cycle = _cycle("otto", {**OTTO, "polytropicIndex": 1.3})
        assert cycle.processes[0].type is ProcessType.POLYTROPIC
        assert sum(p.work for p in cycle.processes) == pytest.approx(cycle.net_work, rel=1e-6)
        # n < γ: the gas sheds heat while compressed and takes heat while expanding
        assert cycle.processes[0].heat < 0
        assert cycle.processes[2].heat > 0
        assert 0 < cycle.efficiency < 1


class TestCycleOrdering:
    def test_diesel_below_otto(self):
        otto = _cycle("otto", OTTO)
        diesel = _cycle("diesel", {**OTTO, "cutoffRatio": 2})
        assert diesel.efficiency < otto.efficiency

    def test_diesel_formula(self):
        r, rc, g = 16.0, 1.8, 1.4
        expected = 1 - (rc**g - 1) / (g * (rc - 1) * r ** (g - 1))
        cycle = _cycle("diesel", {"T1": 300, "P1": 100, "compressionRatio": r, "cutoffRatio": rc})
        assert cycle.efficiency == pytest.approx(expected, rel=1e-3)

    def test_brayton_formula(self):
        cycle = _cycle("brayton", {"T1": 300, "P1": 100, "pressureRatio": 8, "T3": 1200})
        assert cycle.efficiency == pytest.approx(1 - 8 ** (-0.4 / 1.4), rel=1e-3)

    def test_carnot_is_the_limit(self):
        carnot = _cycle("carnot", {"T1": 300, "T3": 1200, "P1": 100})
        assert carnot.efficiency == pytest.approx(1 - 300 / 1200, rel=1e-9)
        brayton = _cycle("brayton", {"T1": 300, "P1": 100, "pressureRatio": 8, "T3": 1200})
        assert brayton.efficiency < carnot.efficiency


class TestSecondLaw:
    @pytest.mark.parametrize("preset", list_presets(), ids=lambda p: p.id)
    def test_entropy_sums_to_zero(self, preset):
        cycle = solve_cycle(preset.to_config())
        scale = max(abs(p.entropy_change) for p in cycle.processes)
        assert cycle.total_entropy_change == pytest.approx(0.0, abs=1e-2 * scale)

    def test_carnot_generates_no_entropy(self):
        cycle = _cycle("carnot", {"T1": 300, "T3": 1200, "P1": 100}, extended=True)
        assert cycle.entropy_generation == pytest.approx(0.0, abs=1e-9)

    def test_refrigeration_generates_no_entropy(self):
        cycle = _cycle(
            "refrigeration", {"evaporatorTemp": 273.15, "condenserTemp": 313.15}, fluid="r134a",
            extended=True,
        )
        assert cycle.entropy_generation == pytest.approx(0.0, abs=1e-9)


class TestVapourCycles:
    def test_refrigeration_cop(self):
        cycle = _cycle(
            "refrigeration", {"evaporatorTemp": 273.15, "condenserTemp": 313.15}, fluid="r134a"
        )
        assert cycle.is_refrigeration
        assert cycle.net_work < 0
        assert cycle.efficiency == pytest.approx(273.15 / 40.0, rel=1e-6)

    def test_rankine_performance(self):
        cycle = _cycle(
            "rankine",
            {"boilerPressure": 3000, "condenserPressure": 10, "turbineInletTemp": 800},
            fluid="water",
        )
        assert 0 < cycle.efficiency < 1 - cycle.states[0].temperature / 800.0
        assert cycle.net_work == pytest.approx(cycle.heat_in - cycle.heat_out)

    def test_quality_in_range(self):
        rankine = _cycle(
            "rankine",
            {"boilerPressure": 3000, "condenserPressure": 10, "turbineInletTemp": 800},
            fluid="water",
            extended=True,
        )
        assert 0.0 <= rankine.quality <= 1.0
        h_fg = latent_heat(rankine.fluid, rankine.states[0].temperature)
        assert rankine.quality == pytest.approx(rankine.heat_out / h_fg)

        refrigeration = _cycle(
            "refrigeration", {"evaporatorTemp": 273.15, "condenserTemp": 313.15}, fluid="r134a",
            extended=True,
        )
        assert 0.0 <= refrigeration.quality <= 1.0

    def test_turbine_losses_generate_entropy(self):
        params = {"boilerPressure": 3000, "condenserPressure": 10, "turbineInletTemp": 800}
        ideal = _cycle("rankine", params, fluid="water", extended=True)
        lossy = _cycle("rankine", {**params, "turbineEfficiency": 0.85}, fluid="water", extended=True)

        assert lossy.efficiency < ideal.efficiency
        assert lossy.entropy_generation > ideal.entropy_generation
        turbine = lossy.processes[2]
        assert turbine.type is ProcessType.ADIABATIC
        assert turbine.heat == 0.0
        assert turbine.entropy_change > 0
        scale = max(abs(p.entropy_change) for p in lossy.processes)
        assert lossy.total_entropy_change == pytest.approx(0.0, abs=1e-6 * scale)

    def test_compressor_losses_lower_cop(self):
        params = {"evaporatorTemp": 273.15, "condenserTemp": 313.15}
        ideal = _cycle("refrigeration", params, fluid="r134a")
        lossy = _cycle("refrigeration", {**params, "compressorEfficiency": 0.8}, fluid="r134a")
        assert lossy.efficiency < ideal.efficiency
        assert lossy.heat_in == pytest.approx(ideal.heat_in)

    def test_superheat_and_subcool_close(self):
        cycle = _cycle(
            "refrigeration",
            {"evaporatorTemp": 273.15, "condenserTemp": 313.15, "superheat": 5, "subcool": 3},
            fluid="r134a",
            extended=True,
        )
        assert len(cycle.processes) == 7
        assert cycle.net_work == pytest.approx(cycle.heat_in - cycle.heat_out)
        assert 0.0 <= cycle.quality <= 1.0
        evaporator = cycle.processes[5]
        assert evaporator.name == "Evaporator Heat Absorption"
        h_fg = latent_heat(cycle.fluid, 273.15)
        assert cycle.quality == pytest.approx(max(0.0, 1.0 - evaporator.heat / h_fg))


class TestIdentity:
    def test_deterministic_id(self):
        config = SimulationConfig.from_mapping("air", "otto", OTTO)
        assert _cycle("otto", OTTO).id == cycle_id_for(config)
        assert len(cycle_id_for(config)) == 12

    def test_id_depends_on_parameters(self):
        a = SimulationConfig.from_mapping("air", "otto", OTTO)
        b = SimulationConfig.from_mapping("air", "otto", {**OTTO, "compressionRatio": 9})
        assert cycle_id_for(a) != cycle_id_for(b)

    def test_equal_configs_give_equal_cycles(self):
        assert _cycle("otto", OTTO) == _cycle("otto", dict(reversed(list(OTTO.items()))))

    def test_settings_reference_state(self):
        config = SimulationConfig.from_mapping("air", "otto", OTTO)
        settings = EngineSettings(reference_temperature=300.0, reference_pressure=100.0)
        cycle = solve_cycle(config, settings=settings)
        assert cycle.states[0].entropy == pytest.approx(0.0, abs=1e-12)


class TestAggregateCycle:
    def _adiabatic_loop(self):
        s1 = ideal_gas_state("1", "1", 300.0, 100.0, AIR)
        s2 = ideal_gas_state("2", "2", 300.0 * 2**0.4, 100.0 * 2**1.4, AIR)
        p12 = evaluate_process(s1, s2, ProcessType.ISENTROPIC, AIR)
        p21 = evaluate_process(s2, s1, ProcessType.ISENTROPIC, AIR)
        return (s1, s2), (p12, p21)

    def test_no_heat_is_degenerate(self):
        states, processes = self._adiabatic_loop()
        with pytest.raises(DegenerateCycle):
            aggregate_cycle("x", "loop", CycleType.OTTO, AIR, states, processes)

    def test_length_mismatch(self):
        states, processes = self._adiabatic_loop()
        with pytest.raises(ValueError):
            aggregate_cycle("x", "loop", CycleType.OTTO, AIR, states, processes[:1])

    def test_huge_heat_addition_is_invalid(self):
        with pytest.raises(InvalidParameter):
            _cycle("otto", {**OTTO, "heatAddition": 1e308})

    @pytest.mark.parametrize(
        "overrides",
        [{"T1": 1e300}, {"P1": 1e-300}],
        ids=["hot-intake", "near-vacuum-intake"],
    )
    def test_overflowing_states_are_invalid(self, overrides):
        with pytest.raises(InvalidParameter) as exc_info:
            _cycle("otto", {**OTTO, **overrides})
        assert exc_info.value.key == "otto"
