"""Input validation for cycle parameters."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from thermoviz.core.errors import InvalidParameter


class Severity(Enum):
    """Severity level for validation messages."""

    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationMessage:
    """A single validation finding."""

    severity: Severity
    parameter: str
    message: str
    value: Any = None
    limit: Any = None


@dataclass
class ValidationResult:
    """Aggregated validation result."""

    messages: list[ValidationMessage] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(m.severity == Severity.ERROR for m in self.messages)

    @property
    def errors(self) -> list[ValidationMessage]:
        return [m for m in self.messages if m.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationMessage]:
        return [m for m in self.messages if m.severity == Severity.WARNING]

    def add(self, severity: Severity, parameter: str, message: str, **kwargs: Any) -> None:
        self.messages.append(
            ValidationMessage(severity=severity, parameter=parameter, message=message, **kwargs)
        )

    def error(self, parameter: str, message: str, **kwargs: Any) -> None:
        self.add(Severity.ERROR, parameter, message, **kwargs)

    def warning(self, parameter: str, message: str, **kwargs: Any) -> None:
        self.add(Severity.WARNING, parameter, message, **kwargs)

    def raise_for_errors(self) -> None:
        """Raise InvalidParameter for the first error, if any."""
        for m in self.errors:
            raise InvalidParameter(m.parameter, m.value, m.message)


# --- Common validators ---


def validate_finite(name: str, value: float, result: ValidationResult) -> bool:
    """Validate that a value is a finite real number. Returns True if it is."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        result.error(name, f"must be a number, got {type(value).__name__}", value=value)
        return False
    if not math.isfinite(value):
        result.error(name, "must be finite", value=value)
        return False
    return True


def validate_positive(name: str, value: float, result: ValidationResult) -> None:
    """Validate that a value is strictly positive."""
    if validate_finite(name, value, result) and value <= 0:
        result.error(name, f"must be positive, got {value}", value=value, limit=0.0)


def validate_non_negative(name: str, value: float, result: ValidationResult) -> None:
    """Validate that a value is zero or positive."""
    if validate_finite(name, value, result) and value < 0:
        result.error(name, f"must not be negative, got {value}", value=value, limit=0.0)


def validate_greater(
    name: str,
    value: float,
    bound: float,
    result: ValidationResult,
    reason: str = "",
) -> None:
    """Validate that a value strictly exceeds *bound*."""
    if validate_finite(name, value, result) and value <= bound:
        result.error(name, reason or f"must be greater than {bound:g}", value=value, limit=bound)


def validate_range(
    name: str,
    value: float,
    low: float,
    high: float,
    result: ValidationResult,
) -> None:
    """Validate that a value falls within [low, high]."""
    if validate_finite(name, value, result) and (value < low or value > high):
        result.error(
            name, f"{value:g} is outside [{low:g}, {high:g}]", value=value, limit=(low, high)
        )
