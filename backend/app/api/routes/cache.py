"""Cache maintenance endpoints."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends

from app.api.dependencies.prices import get_cache_store
from app.schemas import CacheClearResponse, CacheStatsResponse
from dca_simulator.cache import CacheStore

router = APIRouter()


@router.get("/stats", response_model=CacheStatsResponse)
async def cache_stats(cache: CacheStore = Depends(get_cache_store)) -> CacheStatsResponse:
    stats = await asyncio.to_thread(cache.get_stats)
    return CacheStatsResponse(**stats.to_dict())


@router.post("/clear-expired", response_model=CacheClearResponse)
async def clear_expired(cache: CacheStore = Depends(get_cache_store)) -> CacheClearResponse:
    """Drop expired and unreadable entries."""

    return CacheClearResponse(removed=await asyncio.to_thread(cache.clear_expired))


@router.delete("", response_model=CacheClearResponse)
async def clear_all(cache: CacheStore = Depends(get_cache_store)) -> CacheClearResponse:
    return CacheClearResponse(removed=await asyncio.to_thread(cache.clear_all))


__all__ = ["cache_stats", "clear_expired", "clear_all"]
