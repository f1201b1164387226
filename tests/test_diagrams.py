"""Tests for diagram sampling."""

import numpy as np
import pytest

from thermoviz.core.presets import get_preset
from thermoviz.cycle.aggregator import solve_cycle
from thermoviz.cycle.diagrams import (
    ChartPoint,
    DiagramSeries,
    DiagramType,
    enclosed_area,
    iter_leg_points,
    parse_diagram_type,
    sample_diagram,
)
from thermoviz.cycle.parameters import SimulationConfig


@pytest.fixture
def otto():
    config = SimulationConfig.from_mapping("air", "otto", {"T1": 300, "P1": 100, "compressionRatio": 8})
    return solve_cycle(config)


@pytest.fixture
def refrigeration():
    return solve_cycle(get_preset("refrigeration-standard").to_config())


class TestLegSampling:
    @pytest.mark.parametrize("n", [1, 5, 20])
    def test_point_count(self, otto, n):
        for process in otto.processes:
            points = list(iter_leg_points(process, DiagramType.PV, n, otto.fluid))
            assert len(points) == n + 1

    def test_endpoints_are_states(self, otto):
        for process in otto.processes:
            points = list(iter_leg_points(process, DiagramType.PV, 20, otto.fluid))
            assert points[0].x == process.start_state.volume
            assert points[0].y == process.start_state.pressure
            assert points[-1].x == process.end_state.volume
            assert points[-1].y == process.end_state.pressure
            assert points[0].state == process.start_state.name
            assert points[-1].state == process.end_state.name
            assert all(p.state is None for p in points[1:-1])

    def test_ts_endpoints(self, otto):
        process = otto.processes[1]
        points = list(iter_leg_points(process, DiagramType.TS, 10, otto.fluid))
        assert (points[0].x, points[0].y) == (process.start_state.entropy, process.start_state.temperature)
        assert (points[-1].x, points[-1].y) == (process.end_state.entropy, process.end_state.temperature)

    def test_isentropic_follows_curve(self, otto):
        """Interior samples lie on P·v^γ = const, not on a straight line."""
        process = otto.processes[0]
        g = otto.fluid.gamma
        const = process.start_state.pressure * process.start_state.volume**g
        points = list(iter_leg_points(process, DiagramType.PV, 20, otto.fluid))
        for p in points[1:-1]:
            assert p.y * p.x**g == pytest.approx(const, rel=1e-9)

    def test_isentropic_is_vertical_on_ts(self, otto):
        process = otto.processes[0]
        points = list(iter_leg_points(process, DiagramType.TS, 20, otto.fluid))
        for p in points:
            assert p.x == pytest.approx(process.start_state.entropy, abs=1e-3)

    def test_isochoric_keeps_volume(self, otto):
        process = otto.processes[1]
        for p in iter_leg_points(process, DiagramType.PV, 20, otto.fluid):
            assert p.x == pytest.approx(process.start_state.volume)

    def test_isothermal_keeps_temperature(self, refrigeration):
        process = refrigeration.processes[1]
        for p in iter_leg_points(process, DiagramType.TS, 20, refrigeration.fluid):
            assert p.y == pytest.approx(process.start_state.temperature)

    def test_invalid_sample_count(self, otto):
        with pytest.raises(ValueError):
            list(iter_leg_points(otto.processes[0], DiagramType.PV, 0, otto.fluid))


class TestDiagramSeries:
    def test_total_points(self, otto):
        series = sample_diagram(otto, DiagramType.PV, samples_per_leg=20)
        assert len(series) == 4 * 20 + 1
        assert len(list(series)) == len(series)

    def test_closes_on_state_one(self, otto):
        points = sample_diagram(otto, "ts").points
        first, last = points[0], points[-1]
        assert (first.x, first.y, first.state) == (last.x, last.y, last.state)
        assert first.state == otto.states[0].name

    def test_vertices_not_repeated(self, otto):
        series = sample_diagram(otto, DiagramType.PV, samples_per_leg=5)
        labels = [p.state for p in series.vertices]
        assert labels == [s.name for s in otto.states] + [otto.states[0].name]

    def test_restartable(self, otto):
        series = sample_diagram(otto, DiagramType.PH, samples_per_leg=3)
        assert list(series) == list(series)

    def test_points_cached(self, otto):
        series = sample_diagram(otto, DiagramType.PV)
        assert series.points is series.points
        assert series[0] == ChartPoint(otto.states[0].volume, otto.states[0].pressure, otto.states[0].name)

    def test_to_arrays(self, otto):
        x, y = sample_diagram(otto, DiagramType.PV, samples_per_leg=10).to_arrays()
        assert isinstance(x, np.ndarray)
        assert x.shape == y.shape == (41,)
        assert np.all(x > 0) and np.all(y > 0)

    def test_ph_axes(self, otto):
        point = sample_diagram(otto, DiagramType.PH)[0]
        assert point.x == otto.states[0].enthalpy
        assert point.y == otto.states[0].pressure

    def test_hs_axes(self, otto):
        point = sample_diagram(otto, DiagramType.HS)[0]
        assert point.x == otto.states[0].entropy
        assert point.y == otto.states[0].enthalpy

    def test_irreversible_legs_sampled(self):
        config = SimulationConfig.from_mapping(
            "water",
            "rankine",
            {
                "boilerPressure": 3000,
                "condenserPressure": 10,
                "turbineInletTemp": 800,
                "turbineEfficiency": 0.85,
            },
        )
        cycle = solve_cycle(config)
        series = sample_diagram(cycle, DiagramType.TS, samples_per_leg=6)
        assert len(series) == 5 * 6 + 1
        labels = [p.state for p in series.vertices]
        assert labels == [s.name for s in cycle.states] + [cycle.states[0].name]

    def test_rejects_zero_samples(self, otto):
        with pytest.raises(ValueError):
            DiagramSeries(otto, DiagramType.PV, samples_per_leg=0)


class TestEnclosedArea:
    @pytest.mark.parametrize("diagram", [DiagramType.PV, DiagramType.TS])
    def test_area_is_net_work(self, otto, diagram):
        series = sample_diagram(otto, diagram, samples_per_leg=50)
        assert enclosed_area(series) == pytest.approx(otto.net_work, rel=1e-2)

    def test_refrigeration_loop_is_negative(self, refrigeration):
        series = sample_diagram(refrigeration, DiagramType.TS, samples_per_leg=50)
        assert enclosed_area(series) == pytest.approx(refrigeration.net_work, rel=1e-2)
        assert enclosed_area(series) < 0


class TestParseDiagramType:
    def test_parse(self):
        assert parse_diagram_type("PV") is DiagramType.PV
        assert parse_diagram_type(DiagramType.TS) is DiagramType.TS

    def test_unknown(self):
        with pytest.raises(ValueError, match="Valid types"):
            parse_diagram_type("xy")

    def test_axis_labels(self):
        assert DiagramType.TS.axis_labels[1].startswith("Temperature")
