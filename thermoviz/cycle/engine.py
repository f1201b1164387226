"""Memoized entry point of the cycle computations.

A CycleEngine owns its caches, so two engines never share results and a
test can start from a clean slate by building a new one.
"""

from __future__ import annotations

import logging
from typing import Any

from thermoviz.core.config import EngineSettings
from thermoviz.cycle.aggregator import ThermodynamicCycle, cycle_key, solve_cycle
from thermoviz.cycle.diagrams import DiagramSeries, DiagramType, parse_diagram_type, sample_diagram
from thermoviz.cycle.parameters import SimulationConfig
from thermoviz.utils.cache import (
    CalculationCache,
    EvictionStrategy,
    InsertionOrderEviction,
    LeastRecentlyUsedEviction,
    make_key,
)

logger = logging.getLogger(__name__)


def _strategy(name: str) -> EvictionStrategy:
    if name == "lru":
        return LeastRecentlyUsedEviction()
    return InsertionOrderEviction()


class CycleEngine:
    """Computes cycles and diagrams, reusing earlier results.

    Args:
        settings: Cache sizes, sampling density and reference state.
            Defaults to :class:`EngineSettings`.
    """

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or EngineSettings()
        s = self.settings
        self.cycle_cache: CalculationCache[str, ThermodynamicCycle] = CalculationCache(
            s.cycle_cache_size, _strategy(s.eviction), name="cycle"
        )
        self.diagram_caches: dict[DiagramType, CalculationCache[str, DiagramSeries]] = {
            d: CalculationCache(s.diagram_cache_size, _strategy(s.eviction), name=d.value)
            for d in (DiagramType.PV, DiagramType.TS, DiagramType.PH)
        }

    def compute_cycle(self, config: SimulationConfig, extended: bool = False) -> ThermodynamicCycle:
        """Compute (or fetch) the cycle described by *config*.

        Raises:
            ThermoError: If the configuration does not describe a valid cycle.
        """
        key = cycle_key(config, extended)
        cycle = self.cycle_cache.get(key)
        if cycle is not None:
            logger.debug("Cycle cache hit for %s", config.cycle_type.value)
            return cycle

        cycle = solve_cycle(config, extended=extended, settings=self.settings)
        self.cycle_cache.set(key, cycle)
        logger.debug(
            "Computed %s: efficiency %.4f, net work %.2f kJ/kg",
            cycle.name, cycle.efficiency, cycle.net_work,
        )
        return cycle

    def sample_diagram(
        self,
        cycle: ThermodynamicCycle,
        diagram_type: DiagramType | str,
        samples_per_leg: int | None = None,
    ) -> DiagramSeries:
        """Sample (or fetch) a diagram of a computed cycle."""
        diagram_type = parse_diagram_type(diagram_type)
        n = self.settings.samples_per_leg if samples_per_leg is None else samples_per_leg
        cache = self.diagram_caches.get(diagram_type)
        key = make_key(cycle.id, cycle.fluid, diagram_type, n)

        if cache is not None:
            series = cache.get(key)
            if series is not None:
                logger.debug("%s diagram cache hit for cycle %s", diagram_type.value, cycle.id)
                return series

        series = sample_diagram(
            cycle,
            diagram_type,
            n,
            T_ref=self.settings.reference_temperature,
            P_ref=self.settings.reference_pressure,
        )
        if cache is not None:
            cache.set(key, series)
        return series

    def cache_stats(self) -> dict[str, dict[str, Any]]:
        stats = {"cycle": self.cycle_cache.stats()}
        for d, cache in self.diagram_caches.items():
            stats[d.value] = cache.stats()
        return stats

    def clear_caches(self) -> None:
        self.cycle_cache.clear()
        for cache in self.diagram_caches.values():
            cache.clear()
        logger.debug("Cleared all caches")
