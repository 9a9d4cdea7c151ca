"""Shared cache, clock and price source dependencies for API routes."""

from __future__ import annotations

from functools import lru_cache

from app.config import get_settings
from app.db.session import get_engine
from app.db.storage import SqlStorage
from app.providers.coingecko import get_coingecko_client
from app.services.prices import CachedPriceSource
from dca_simulator.cache import CacheStore
from dca_simulator.clock import Clock, SystemClock
from dca_simulator.engine import PriceSource


@lru_cache(maxsize=1)
def get_clock() -> Clock:
    return SystemClock()


@lru_cache(maxsize=1)
def get_cache_store() -> CacheStore:
    """Return the process-wide cache backed by the configured database."""

    settings = get_settings()
    return CacheStore(
        SqlStorage(get_engine(), quota_bytes=settings.cache_max_size_bytes),
        prefix=settings.cache_prefix,
        default_ttl=settings.cache_default_ttl_seconds,
        max_size_bytes=settings.cache_max_size_bytes,
        eviction_threshold=settings.cache_eviction_threshold,
        clock=get_clock(),
    )


def get_price_source() -> PriceSource:
    settings = get_settings()
    return CachedPriceSource.from_settings(get_coingecko_client(), get_cache_store(), settings)


__all__ = ["get_cache_store", "get_clock", "get_price_source"]
