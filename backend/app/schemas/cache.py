"""Schemas for cache maintenance endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class CacheStatsResponse(BaseModel):
    totalEntries: int
    validEntries: int
    expiredEntries: int
    totalSizeBytes: int
    maxSizeBytes: int
    utilizationPercent: float


class CacheClearResponse(BaseModel):
    removed: int


__all__ = ["CacheStatsResponse", "CacheClearResponse"]
