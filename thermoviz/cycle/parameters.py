"""Cycle types, per-cycle parameter sets and the simulation configuration.

Parameters arrive from the input surface as a flat mapping of camelCase keys
(``{"T1": 300, "P1": 100, "compressionRatio": 8}``). Each cycle type has its
own frozen dataclass declaring which keys it needs; building one from a
mapping is where missing and non-physical values are rejected, so the state
solver only ever sees validated inputs.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, Union

from thermoviz.core.errors import MissingParameter
from thermoviz.core.fluids import FluidProperties, resolve_fluid
from thermoviz.core.states import saturation_pressure
from thermoviz.utils.constants import P_TRIPLE_WATER, T_CRITICAL_WATER
from thermoviz.utils.validation import (
    ValidationResult,
    validate_greater,
    validate_non_negative,
    validate_positive,
    validate_range,
)

logger = logging.getLogger(__name__)

# Lowest pressure [kPa] the water saturation correlation is calibrated for
_SATURATION_MIN_PRESSURE = 1.0


class CycleType(Enum):
    """Thermodynamic cycle variant."""

    OTTO = "otto"
    DIESEL = "diesel"
    RANKINE = "rankine"
    BRAYTON = "brayton"
    CARNOT = "carnot"
    REFRIGERATION = "refrigeration"

    @property
    def label(self) -> str:
        if self is CycleType.REFRIGERATION:
            return "Vapor Compression Refrigeration Cycle"
        return f"{self.value.title()} Cycle"


def _key(name: str) -> Any:
    return field(metadata={"key": name})


def _optional(name: str, default: float | None) -> Any:
    return field(default=default, metadata={"key": name})


def _non_negative(name: str, default: float = 0.0) -> Any:
    return field(default=default, metadata={"key": name, "non_negative": True})


@dataclass(frozen=True)
class CycleParameters:
    """Base class for the per-cycle parameter variants."""

    cycle_type: ClassVar[CycleType]

    @classmethod
    def keys(cls) -> dict[str, str]:
        """Map external parameter keys to attribute names."""
        return {f.metadata["key"]: f.name for f in dataclasses.fields(cls)}

    @classmethod
    def required_keys(cls) -> list[str]:
        return [
            f.metadata["key"]
            for f in dataclasses.fields(cls)
            if f.default is dataclasses.MISSING
        ]

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, float]) -> CycleParameters:
        """Build and validate a parameter set from a flat key/value mapping.

        Keys that do not belong to this cycle type are ignored.

        Raises:
            MissingParameter: If a required key is absent.
            InvalidParameter: If a value is non-physical.
        """
        for key in cls.required_keys():
            if mapping.get(key) is None:
                raise MissingParameter(key, cls.cycle_type.value)

        known = cls.keys()
        ignored = sorted(k for k in mapping if k not in known)
        if ignored:
            logger.debug("Ignoring parameters not used by %s: %s", cls.cycle_type.value, ignored)

        kwargs = {attr: mapping[key] for key, attr in known.items() if mapping.get(key) is not None}
        params = cls(**kwargs)
        result = params.validate()
        result.raise_for_errors()
        for m in result.warnings:
            logger.warning("%s parameter %s: %s", cls.cycle_type.value, m.parameter, m.message)
        return params

    def to_mapping(self) -> dict[str, float]:
        """Return the parameters as external keys, defaults included."""
        return {
            f.metadata["key"]: float(getattr(self, f.name))
            for f in dataclasses.fields(self)
            if getattr(self, f.name) is not None
        }

    def validate(self) -> ValidationResult:
        result = ValidationResult()
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.metadata.get("non_negative"):
                validate_non_negative(f.metadata["key"], value, result)
            else:
                validate_positive(f.metadata["key"], value, result)
        return result


def _validate_polytropic_index(n: float | None, result: ValidationResult) -> None:
    if n is not None:
        validate_range("polytropicIndex", n, 1.0, 3.0, result)


def _validate_efficiency(key: str, eta: float, result: ValidationResult) -> None:
    validate_range(key, eta, 0.0, 1.0, result)


@dataclass(frozen=True)
class OttoParameters(CycleParameters):
    """Spark-ignition air-standard cycle."""

    cycle_type: ClassVar[CycleType] = CycleType.OTTO

    T1: float = _key("T1")  # K
    P1: float = _key("P1")  # kPa
    compression_ratio: float = _key("compressionRatio")
    heat_addition: float = _optional("heatAddition", 1000.0)  # kJ/kg
    polytropic_index: float | None = _optional("polytropicIndex", None)

    def validate(self) -> ValidationResult:
        result = super().validate()
        validate_greater(
            "compressionRatio", self.compression_ratio, 1.0, result,
            "compression ratio must exceed 1 (no temperature rise otherwise)",
        )
        _validate_polytropic_index(self.polytropic_index, result)
        return result


@dataclass(frozen=True)
class DieselParameters(CycleParameters):
    """Compression-ignition air-standard cycle."""

    cycle_type: ClassVar[CycleType] = CycleType.DIESEL

    T1: float = _key("T1")
    P1: float = _key("P1")
    compression_ratio: float = _key("compressionRatio")
    cutoff_ratio: float = _key("cutoffRatio")
    polytropic_index: float | None = _optional("polytropicIndex", None)

    def validate(self) -> ValidationResult:
        result = super().validate()
        validate_greater(
            "compressionRatio", self.compression_ratio, 1.0, result,
            "compression ratio must exceed 1 (no temperature rise otherwise)",
        )
        validate_greater("cutoffRatio", self.cutoff_ratio, 1.0, result)
        if result.is_valid and self.cutoff_ratio >= self.compression_ratio:
            result.error(
                "cutoffRatio",
                f"must be smaller than the compression ratio {self.compression_ratio:g}",
                value=self.cutoff_ratio,
                limit=self.compression_ratio,
            )
        _validate_polytropic_index(self.polytropic_index, result)
        return result


@dataclass(frozen=True)
class BraytonParameters(CycleParameters):
    """Gas-turbine cycle with isobaric heat addition."""

    cycle_type: ClassVar[CycleType] = CycleType.BRAYTON

    T1: float = _key("T1")
    P1: float = _key("P1")
    pressure_ratio: float = _key("pressureRatio")
    T3: float = _optional("T3", 1200.0)  # K, turbine inlet
    polytropic_index: float | None = _optional("polytropicIndex", None)

    def validate(self) -> ValidationResult:
        result = super().validate()
        validate_greater("pressureRatio", self.pressure_ratio, 1.0, result)
        _validate_polytropic_index(self.polytropic_index, result)
        return result


@dataclass(frozen=True)
class CarnotParameters(CycleParameters):
    """Reversible cycle between two reservoirs.

    T1 is the cold reservoir, T3 the hot one.
    """

    cycle_type: ClassVar[CycleType] = CycleType.CARNOT

    T1: float = _key("T1")
    T3: float = _key("T3")
    P1: float = _key("P1")
    volume_ratio: float = _optional("volumeRatio", 2.0)

    def validate(self) -> ValidationResult:
        result = super().validate()
        validate_greater(
            "T3", self.T3, self.T1, result,
            f"hot reservoir temperature must exceed T1 = {self.T1:g} K",
        )
        validate_greater("volumeRatio", self.volume_ratio, 1.0, result)
        return result


@dataclass(frozen=True)
class RankineParameters(CycleParameters):
    """Steam power cycle.

    Pump and turbine efficiencies below 1 make those legs irreversible
    adiabatic; the turbine exhaust is then superheated and desuperheats
    before condensing.
    """

    cycle_type: ClassVar[CycleType] = CycleType.RANKINE

    boiler_pressure: float = _key("boilerPressure")  # kPa
    condenser_pressure: float = _key("condenserPressure")  # kPa
    turbine_inlet_temp: float = _key("turbineInletTemp")  # K
    pump_efficiency: float = _optional("pumpEfficiency", 1.0)
    turbine_efficiency: float = _optional("turbineEfficiency", 1.0)

    def validate(self) -> ValidationResult:
        result = super().validate()
        p_crit = saturation_pressure(T_CRITICAL_WATER)
        validate_range("boilerPressure", self.boiler_pressure, 0.0, p_crit, result)
        validate_greater(
            "boilerPressure", self.boiler_pressure, self.condenser_pressure, result,
            f"must exceed the condenser pressure {self.condenser_pressure:g} kPa",
        )
        _validate_efficiency("pumpEfficiency", self.pump_efficiency, result)
        _validate_efficiency("turbineEfficiency", self.turbine_efficiency, result)
        if not result.is_valid:
            return result
        if self.condenser_pressure < P_TRIPLE_WATER:
            result.error(
                "condenserPressure",
                f"below the triple point of water ({P_TRIPLE_WATER:g} kPa), no liquid phase",
                value=self.condenser_pressure,
                limit=P_TRIPLE_WATER,
            )
        elif self.condenser_pressure < _SATURATION_MIN_PRESSURE:
            result.warning(
                "condenserPressure",
                f"{self.condenser_pressure:g} kPa is below the "
                f"{_SATURATION_MIN_PRESSURE:g} kPa limit of the saturation correlation",
                value=self.condenser_pressure,
                limit=_SATURATION_MIN_PRESSURE,
            )
        return result


@dataclass(frozen=True)
class RefrigerationParameters(CycleParameters):
    """Vapour-compression refrigeration cycle.

    ``superheat`` and ``subcool`` [K] add isobaric legs after the evaporator
    and after the condenser. A compressor efficiency below 1 makes the
    compression irreversible.
    """

    cycle_type: ClassVar[CycleType] = CycleType.REFRIGERATION

    evaporator_temp: float = _key("evaporatorTemp")  # K
    condenser_temp: float = _key("condenserTemp")  # K
    P1: float = _optional("P1", 100.0)  # kPa, compressor inlet
    volume_ratio: float = _optional("volumeRatio", 2.0)
    superheat: float = _non_negative("superheat")  # K
    subcool: float = _non_negative("subcool")  # K
    compressor_efficiency: float = _optional("compressorEfficiency", 1.0)

    def validate(self) -> ValidationResult:
        result = super().validate()
        validate_greater(
            "condenserTemp", self.condenser_temp, self.evaporator_temp, result,
            f"must exceed the evaporator temperature {self.evaporator_temp:g} K",
        )
        validate_greater("volumeRatio", self.volume_ratio, 1.0, result)
        _validate_efficiency("compressorEfficiency", self.compressor_efficiency, result)
        if result.is_valid and self.condenser_temp - self.subcool <= self.evaporator_temp:
            result.error(
                "subcool",
                "subcooled liquid must stay above the evaporator temperature",
                value=self.subcool,
                limit=self.condenser_temp - self.evaporator_temp,
            )
        return result


AnyCycleParameters = Union[
    OttoParameters,
    DieselParameters,
    BraytonParameters,
    CarnotParameters,
    RankineParameters,
    RefrigerationParameters,
]

PARAMETER_TYPES: dict[CycleType, type[CycleParameters]] = {
    cls.cycle_type: cls
    for cls in (
        OttoParameters,
        DieselParameters,
        BraytonParameters,
        CarnotParameters,
        RankineParameters,
        RefrigerationParameters,
    )
}


def parse_cycle_type(value: str | CycleType) -> CycleType:
    """Accept a CycleType or its string value (case-insensitive)."""
    if isinstance(value, CycleType):
        return value
    try:
        return CycleType(value.strip().lower())
    except ValueError:
        valid = ", ".join(t.value for t in CycleType)
        raise ValueError(f"Unknown cycle type '{value}'. Valid types: {valid}") from None


@dataclass(frozen=True)
class SimulationConfig:
    """The complete input of one cycle computation."""

    fluid: FluidProperties
    cycle_type: CycleType
    parameters: AnyCycleParameters

    def __post_init__(self) -> None:
        if self.parameters.cycle_type is not self.cycle_type:
            raise ValueError(
                f"{type(self.parameters).__name__} cannot configure a {self.cycle_type.value} cycle"
            )

    @classmethod
    def from_mapping(
        cls,
        fluid: str | FluidProperties,
        cycle_type: str | CycleType,
        parameters: Mapping[str, float],
    ) -> SimulationConfig:
        """Resolve the fluid, pick the parameter variant and validate the values."""
        ctype = parse_cycle_type(cycle_type)
        params = PARAMETER_TYPES[ctype].from_mapping(parameters)
        return cls(fluid=resolve_fluid(fluid), cycle_type=ctype, parameters=params)

    def key_parts(self) -> tuple[FluidProperties, str, dict[str, float]]:
        """Fluid, cycle type and full parameter mapping, in cache-key order."""
        return (self.fluid, self.cycle_type.value, self.parameters.to_mapping())
