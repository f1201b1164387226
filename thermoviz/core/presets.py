"""Named cycle configurations.

Typical engine and plant operating points, usable as starting values for
``thermoviz cycle analyze --preset`` or programmatically through
:func:`get_preset`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from thermoviz.cycle.parameters import CycleType, SimulationConfig


@dataclass(frozen=True)
class CyclePreset:
    """A named, ready-to-run cycle configuration."""

    id: str
    name: str
    description: str
    cycle_type: CycleType
    parameters: Mapping[str, float] = field(default_factory=dict)
    fluid: str = "air"
    category: str = "standard"  # "standard", "high-performance" or "efficient"

    def to_config(self, overrides: Mapping[str, float] | None = None) -> SimulationConfig:
        """Validated configuration, with *overrides* replacing preset values."""
        params = {**self.parameters, **(overrides or {})}
        return SimulationConfig.from_mapping(self.fluid, self.cycle_type, params)


def _preset(
    id: str,
    name: str,
    description: str,
    cycle_type: CycleType,
    category: str = "standard",
    fluid: str = "air",
    **parameters: float,
) -> CyclePreset:
    return CyclePreset(
        id=id,
        name=name,
        description=description,
        cycle_type=cycle_type,
        parameters=MappingProxyType(parameters),
        fluid=fluid,
        category=category,
    )


_PRESETS: tuple[CyclePreset, ...] = (
    _preset(
        "otto-standard", "Otto Cycle - Standard",
        "Typical spark-ignition engine parameters",
        CycleType.OTTO,
        T1=300.0, P1=100.0, compressionRatio=8.0, heatAddition=1000.0,
    ),
    _preset(
        "otto-high-performance", "Otto Cycle - High Performance",
        "High compression ratio for maximum power",
        CycleType.OTTO, "high-performance",
        T1=300.0, P1=100.0, compressionRatio=12.0, heatAddition=1500.0,
    ),
    _preset(
        "otto-efficient", "Otto Cycle - Fuel Efficient",
        "Optimized for fuel economy",
        CycleType.OTTO, "efficient",
        T1=300.0, P1=100.0, compressionRatio=10.0, heatAddition=800.0,
    ),
    _preset(
        "diesel-standard", "Diesel Cycle - Standard",
        "Typical compression-ignition engine",
        CycleType.DIESEL,
        T1=300.0, P1=100.0, compressionRatio=16.0, cutoffRatio=1.8,
    ),
    _preset(
        "diesel-heavy-duty", "Diesel Cycle - Heavy Duty",
        "High compression for truck and bus applications",
        CycleType.DIESEL, "high-performance",
        T1=300.0, P1=100.0, compressionRatio=18.0, cutoffRatio=2.2,
    ),
    _preset(
        "brayton-standard", "Brayton Cycle - Standard",
        "Gas turbine power plant",
        CycleType.BRAYTON,
        T1=300.0, P1=100.0, pressureRatio=8.0, T3=1200.0,
    ),
    _preset(
        "brayton-jet-engine", "Brayton Cycle - Jet Engine",
        "Aircraft propulsion cycle at altitude inlet conditions",
        CycleType.BRAYTON, "high-performance",
        T1=250.0, P1=25.0, pressureRatio=12.0, T3=1400.0,
    ),
    _preset(
        "carnot-standard", "Carnot Cycle - Reference",
        "Reversible benchmark between 300 K and 1200 K reservoirs",
        CycleType.CARNOT,
        T1=300.0, T3=1200.0, P1=100.0, volumeRatio=2.0,
    ),
    _preset(
        "rankine-standard", "Rankine Cycle - Steam Plant",
        "Superheated steam cycle, 30 bar boiler and 0.1 bar condenser",
        CycleType.RANKINE, fluid="water",
        boilerPressure=3000.0, condenserPressure=10.0, turbineInletTemp=800.0,
    ),
    _preset(
        "refrigeration-standard", "Refrigeration - Domestic",
        "R-134a cycle between 0 °C evaporator and 40 °C condenser",
        CycleType.REFRIGERATION, fluid="r134a",
        evaporatorTemp=273.15, condenserTemp=313.15,
    ),
)

PRESETS: Mapping[str, CyclePreset] = MappingProxyType({p.id: p for p in _PRESETS})


def list_presets(cycle_type: CycleType | None = None) -> list[CyclePreset]:
    """All presets, optionally restricted to one cycle type."""
    return [p for p in _PRESETS if cycle_type is None or p.cycle_type is cycle_type]


def presets_by_category(category: str) -> list[CyclePreset]:
    return [p for p in _PRESETS if p.category == category]


def get_preset(preset_id: str) -> CyclePreset:
    """Look up a preset by id.

    Raises:
        KeyError: If no preset has this id.
    """
    try:
        return PRESETS[preset_id]
    except KeyError:
        raise KeyError(
            f"Unknown preset '{preset_id}'. Available: {', '.join(PRESETS)}"
        ) from None
