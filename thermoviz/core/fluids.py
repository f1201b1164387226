"""Working-fluid property table.

Each fluid is reduced to the four ideal-gas constants the cycle engine needs
(R, γ, cp, cv). The table is loaded once from the bundled JSON file and the
returned objects are shared by reference. CoolProp can be used to derive the
same four constants for any fluid it knows at a chosen reference state.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import CoolProp.CoolProp as CP

from thermoviz.core.errors import UnknownFluid
from thermoviz.utils.constants import J_TO_KJ, P_REF, R_UNIVERSAL, T_REF

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"
_FLUID_DB_PATH = _DATA_DIR / "fluids.json"

# Relative tolerance for cp − cv = R and γ = cp/cv
_CONSISTENCY_RTOL = 1e-2


@dataclass(frozen=True)
class FluidProperties:
    """Ideal-gas constants of a working fluid.

    Attributes:
        name: Display name.
        R: Specific gas constant [kJ/(kg·K)].
        gamma: Ratio of specific heats cp/cv.
        cp: Isobaric specific heat [kJ/(kg·K)].
        cv: Isochoric specific heat [kJ/(kg·K)].
    """

    name: str
    R: float
    gamma: float
    cp: float
    cv: float

    def __post_init__(self) -> None:
        for attr in ("R", "gamma", "cp", "cv"):
            value = getattr(self, attr)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{self.name}: {attr} must be positive, got {value}")
        if self.gamma <= 1.0:
            raise ValueError(f"{self.name}: gamma must be > 1, got {self.gamma}")
        if not math.isclose(self.cp - self.cv, self.R, rel_tol=_CONSISTENCY_RTOL):
            raise ValueError(
                f"{self.name}: cp - cv = {self.cp - self.cv:.5f} does not match R = {self.R}"
            )
        if not math.isclose(self.cp / self.cv, self.gamma, rel_tol=_CONSISTENCY_RTOL):
            raise ValueError(
                f"{self.name}: cp / cv = {self.cp / self.cv:.4f} does not match gamma = {self.gamma}"
            )


@lru_cache(maxsize=1)
def _load_fluid_db() -> Mapping[str, FluidProperties]:
    """Load the fluid table from the bundled JSON file."""
    with open(_FLUID_DB_PATH) as f:
        raw = json.load(f)
    table = {key: FluidProperties(**entry) for key, entry in raw.items()}
    logger.debug("Loaded %d fluids from %s", len(table), _FLUID_DB_PATH)
    return MappingProxyType(table)


def fluid_table() -> Mapping[str, FluidProperties]:
    """Return the read-only fluid table keyed by lower-case identifier."""
    return _load_fluid_db()


def list_fluids() -> list[str]:
    """Return identifiers of all fluids in the table."""
    return list(_load_fluid_db().keys())


def lookup(name: str) -> FluidProperties:
    """Look up a fluid by identifier or display name (case-insensitive).

    Raises:
        UnknownFluid: If the name is not in the table.
    """
    db = _load_fluid_db()
    wanted = name.strip().lower()
    for key, fluid in db.items():
        if wanted in (key, fluid.name.lower()):
            return fluid
    raise UnknownFluid(name, list(db.keys()))


def resolve_fluid(fluid: str | FluidProperties) -> FluidProperties:
    """Accept either a FluidProperties instance or a table name."""
    if isinstance(fluid, FluidProperties):
        return fluid
    return lookup(fluid)


def fluid_from_coolprop(name: str, T: float = T_REF, P: float = P_REF) -> FluidProperties:
    """Derive ideal-gas constants for a CoolProp fluid.

    R comes from the molar mass and cp is the CoolProp ideal-gas heat
    capacity at the reference state; cv is taken as cp − R so the
    ideal-gas relations stay exact.

    Table identifiers such as "r134a" are translated to the display name
    CoolProp expects.

    Args:
        name: CoolProp fluid name (e.g. "Nitrogen", "CarbonDioxide") or table id.
        T: Reference temperature [K].
        P: Reference pressure [kPa].

    Raises:
        UnknownFluid: If CoolProp cannot evaluate the fluid at (T, P).
    """
    entry = _load_fluid_db().get(name.strip().lower())
    if entry is not None:
        name = entry.name
    try:
        molar_mass = CP.PropsSI("M", name)  # kg/mol
        cp = CP.PropsSI("Cp0mass", "T", T, "P", P * 1e3, name) * J_TO_KJ
    except ValueError as exc:
        raise UnknownFluid(name) from exc

    R = R_UNIVERSAL / molar_mass * J_TO_KJ
    cv = cp - R
    logger.debug("CoolProp %s at %.1f K, %.1f kPa: R=%.5f cp=%.5f", name, T, P, R, cp)
    return FluidProperties(name=name, R=R, gamma=cp / cv, cp=cp, cv=cv)
