"""Engine settings and result I/O for thermoviz.

Settings are persisted as flat JSON. Computed cycles are exported to JSON
for downstream tools; configurations are not saved here, presets cover
that need.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np

from thermoviz import __version__
from thermoviz.utils.constants import P_REF, T_REF

if TYPE_CHECKING:
    from thermoviz.cycle.aggregator import ThermodynamicCycle

logger = logging.getLogger(__name__)

EVICTION_POLICIES = ("insertion", "lru")


@dataclass
class EngineSettings:
    """Tunables of a CycleEngine session."""

    samples_per_leg: int = 20
    cycle_cache_size: int = 30
    diagram_cache_size: int = 50
    eviction: str = "insertion"  # "insertion" or "lru"
    tolerance: float = 1e-6  # relative, for process-leg consistency checks
    reference_temperature: float = T_REF  # K
    reference_pressure: float = P_REF  # kPa

    def __post_init__(self) -> None:
        if self.samples_per_leg < 1:
            raise ValueError(f"samples_per_leg must be at least 1, got {self.samples_per_leg}")
        if self.cycle_cache_size < 1 or self.diagram_cache_size < 1:
            raise ValueError("Cache sizes must be at least 1")
        if self.eviction not in EVICTION_POLICIES:
            raise ValueError(
                f"Unknown eviction policy '{self.eviction}'. Valid: {', '.join(EVICTION_POLICIES)}"
            )
        if not self.tolerance > 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.reference_temperature <= 0 or self.reference_pressure <= 0:
            raise ValueError("Reference temperature and pressure must be positive")


def load_settings(path: str | Path) -> EngineSettings:
    """Load settings from a JSON file.

    Keys absent from the file keep their defaults.

    Raises:
        ValueError: On unknown keys or invalid values.
    """
    path = Path(path)
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")

    known = {f.name for f in fields(EngineSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"{path}: unknown settings {', '.join(unknown)}")

    settings = EngineSettings(**data)
    logger.debug("Loaded settings from %s: %s", path, settings)
    return settings


def save_settings(settings: EngineSettings, path: str | Path) -> None:
    """Write settings to a JSON file."""
    path = Path(path)
    with open(path, "w") as f:
        json.dump(asdict(settings), f, indent=2)
    logger.info("Saved settings to %s", path)


# --- Result export ---


class _NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types and enums."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def cycle_to_dict(cycle: ThermodynamicCycle) -> dict[str, Any]:
    """Plain-dict view of a cycle.

    Processes reference their states by id instead of embedding copies.
    """
    data = {
        "id": cycle.id,
        "name": cycle.name,
        "type": cycle.type,
        "fluid": asdict(cycle.fluid),
        "states": [asdict(s) for s in cycle.states],
        "processes": [
            {
                "id": p.id,
                "name": p.name,
                "type": p.type,
                "start_state": p.start_state.id,
                "end_state": p.end_state.id,
                "work": p.work,
                "heat": p.heat,
                "entropy_change": p.entropy_change,
                "polytropic_index": p.polytropic_index,
            }
            for p in cycle.processes
        ],
    }
    for name in (
        "efficiency",
        "net_work",
        "heat_in",
        "heat_out",
        "first_law_residual",
        "entropy_generation",
        "exergy",
        "quality",
        "gibbs_free_energy",
        "helmholtz_free_energy",
    ):
        data[name] = getattr(cycle, name)
    return data


def save_cycle_json(cycle: ThermodynamicCycle, path: str | Path) -> None:
    """Save a computed cycle to a JSON file."""
    path = Path(path)
    data = {
        "generator": f"thermoviz {__version__}",
        "created": datetime.now(timezone.utc).isoformat(),
        "cycle": cycle_to_dict(cycle),
    }
    with open(path, "w") as f:
        json.dump(data, f, indent=2, cls=_NumpyEncoder)
    logger.info("Saved cycle %s to %s", cycle.id, path)
