"""Error types raised by the cycle engine.

Every failure is local and deterministic: retrying with the same input
reproduces it. Each error keeps the offending key and value so a user-facing
layer can explain what to change.
"""

from __future__ import annotations

from typing import Any


class ThermoError(Exception):
    """Base class for all thermoviz calculation errors."""


class UnknownFluid(ThermoError):
    """Raised when a working fluid is not in the property table."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = available or []
        msg = f"Unknown fluid '{name}'"
        if self.available:
            msg += f". Available: {', '.join(self.available)}"
        super().__init__(msg)


class MissingParameter(ThermoError):
    """Raised when a parameter required by the cycle type is absent."""

    def __init__(self, key: str, cycle_type: str = ""):
        self.key = key
        self.cycle_type = cycle_type
        where = f" for {cycle_type} cycle" if cycle_type else ""
        super().__init__(f"Missing required parameter '{key}'{where}")


class InvalidParameter(ThermoError):
    """Raised when a parameter value is non-physical."""

    def __init__(self, key: str, value: Any, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid parameter '{key}' = {value!r}: {reason}")


class InvalidLeg(ThermoError):
    """Raised when two states are inconsistent with the claimed process type."""

    def __init__(self, process_type: str, reason: str):
        self.process_type = process_type
        self.reason = reason
        super().__init__(f"Invalid {process_type} leg: {reason}")


class DegenerateCycle(ThermoError):
    """Raised when a cycle has no net heat addition."""
