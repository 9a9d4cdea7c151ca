"""Core package for the DCA simulation engine and price cache."""

from .cache import CacheStats, CacheStore
from .engine import calculate_dca, compare_assets
from .errors import ConfigurationError, DataAvailabilityError, PriceFetchError, SimulationError
from .models import Frequency, PricePoint, Purchase, SimulationConfig, SimulationResult
from .schedule import generate_purchase_dates

__all__ = [
    "CacheStats",
    "CacheStore",
    "calculate_dca",
    "compare_assets",
    "ConfigurationError",
    "DataAvailabilityError",
    "PriceFetchError",
    "SimulationError",
    "Frequency",
    "PricePoint",
    "Purchase",
    "SimulationConfig",
    "SimulationResult",
    "generate_purchase_dates",
]
