"""Thermodynamic cycle analysis for thermoviz.

Solves the vertex states of Otto, Diesel, Brayton, Carnot, Rankine and
refrigeration cycles, evaluates the process legs between them, aggregates
performance figures and samples property diagrams.
"""

from thermoviz.cycle.aggregator import ThermodynamicCycle, solve_cycle
from thermoviz.cycle.diagrams import ChartPoint, DiagramSeries, DiagramType, sample_diagram
from thermoviz.cycle.engine import CycleEngine
from thermoviz.cycle.parameters import CycleType, SimulationConfig

__all__ = [
    "ChartPoint",
    "CycleEngine",
    "CycleType",
    "DiagramSeries",
    "DiagramType",
    "SimulationConfig",
    "ThermodynamicCycle",
    "sample_diagram",
    "solve_cycle",
]
