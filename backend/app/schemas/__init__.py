"""Pydantic schema exports."""

from .cache import CacheClearResponse, CacheStatsResponse
from .simulate import (
    AssetResultSchema,
    ComparisonRequest,
    ComparisonResponse,
    PurchaseSchema,
    SimulationRequest,
    SimulationResponse,
    SummaryStatsSchema,
)

__all__ = [
    "AssetResultSchema",
    "CacheClearResponse",
    "CacheStatsResponse",
    "ComparisonRequest",
    "ComparisonResponse",
    "PurchaseSchema",
    "SimulationRequest",
    "SimulationResponse",
    "SummaryStatsSchema",
]
