"""Exceptions raised by the simulation engine."""
from __future__ import annotations


class SimulationError(RuntimeError):
    """Base class for simulation failures.

    ``stage`` names the step that failed (``config``, ``schedule``, ``fetch`` or
    ``resolution``) so callers can present an actionable message.
    """

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(message)
        self.stage = stage
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"stage": self.stage, "message": self.message}


class ConfigurationError(SimulationError):
    """Raised when the simulation parameters cannot produce a schedule."""


class DataAvailabilityError(SimulationError):
    """Raised when price data is missing for the requested range."""


class PriceFetchError(SimulationError):
    """Raised when the upstream price source fails."""

    def __init__(self, message: str) -> None:
        super().__init__("fetch", message)


__all__ = [
    "SimulationError",
    "ConfigurationError",
    "DataAvailabilityError",
    "PriceFetchError",
]
