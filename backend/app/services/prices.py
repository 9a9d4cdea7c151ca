"""Price source that serves CoinGecko data through the persistent cache."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any

from app.config import AppSettings
from app.providers.coingecko import CoinGeckoClient, CoinGeckoError, parse_asset_pair
from dca_simulator.cache import CacheStore
from dca_simulator.errors import PriceFetchError
from dca_simulator.models import PricePoint

logger = logging.getLogger(__name__)


def _decode_points(payload: Any) -> list[PricePoint] | None:
    if not isinstance(payload, list):
        return None
    points: list[PricePoint] = []
    for item in payload:
        try:
            points.append(PricePoint(timestamp=int(item["timestamp"]), price=float(item["price"])))
        except (KeyError, TypeError, ValueError):
            return None
    return points


class CachedPriceSource:
    """Fetch price data, consulting the cache before any network call.

    A cache miss (including an unreadable entry) simply triggers a fetch;
    upstream failures are raised as ``PriceFetchError``. Cache calls run
    through ``asyncio.to_thread``.
    """

    def __init__(
        self,
        client: CoinGeckoClient,
        cache: CacheStore,
        *,
        default_ttl: float = 86400.0,
        current_price_ttl: float = 300.0,
    ) -> None:
        self._client = client
        self._cache = cache
        self._default_ttl = default_ttl
        self._current_price_ttl = current_price_ttl

    @classmethod
    def from_settings(
        cls, client: CoinGeckoClient, cache: CacheStore, settings: AppSettings
    ) -> "CachedPriceSource":
        return cls(
            client,
            cache,
            default_ttl=settings.cache_default_ttl_seconds,
            current_price_ttl=settings.current_price_ttl_seconds,
        )

    async def get_historical_prices(
        self, asset_pair: str, from_timestamp: int, to_timestamp: int
    ) -> list[PricePoint]:
        cache_key = f"historical:{asset_pair}:{from_timestamp}:{to_timestamp}"
        cached = _decode_points(await asyncio.to_thread(self._cache.get, cache_key))
        if cached:
            logger.debug("Cache hit for %s", cache_key)
            return cached

        try:
            pair = parse_asset_pair(asset_pair)
            raw = await self._client.market_chart_range(
                pair.coin_id, pair.vs_currency, from_timestamp, to_timestamp
            )
        except CoinGeckoError as exc:
            logger.error("Error fetching historical prices for %s: %s", asset_pair, exc)
            raise PriceFetchError(
                f"Failed to fetch historical prices for {asset_pair}: {exc}"
            ) from exc

        points = [PricePoint(timestamp=ts, price=price) for ts, price in raw if price > 0]
        logger.info("Fetched %d historical prices for %s", len(points), asset_pair)
        await asyncio.to_thread(
            self._cache.set,
            cache_key,
            [{"timestamp": p.timestamp, "price": p.price} for p in points],
            self._default_ttl,
        )
        return points

    async def get_current_price(self, asset_pair: str) -> float:
        cache_key = f"current:{asset_pair}"
        cached = await asyncio.to_thread(self._cache.get, cache_key)
        if isinstance(cached, (int, float)):
            return float(cached)

        try:
            pair = parse_asset_pair(asset_pair)
            price = await self._client.simple_price(pair.coin_id, pair.vs_currency)
        except CoinGeckoError as exc:
            logger.error("Error fetching current price for %s: %s", asset_pair, exc)
            raise PriceFetchError(f"Failed to fetch current price for {asset_pair}: {exc}") from exc

        await asyncio.to_thread(self._cache.set, cache_key, price, self._current_price_ttl)
        return price

    async def get_price_on_date(self, asset_pair: str, day: date) -> float:
        cache_key = f"date:{asset_pair}:{day.strftime('%d-%m-%Y')}"
        cached = await asyncio.to_thread(self._cache.get, cache_key)
        if isinstance(cached, (int, float)):
            return float(cached)

        try:
            pair = parse_asset_pair(asset_pair)
            price = await self._client.coin_history(pair.coin_id, pair.vs_currency, day)
        except CoinGeckoError as exc:
            raise PriceFetchError(
                f"Failed to fetch price for {asset_pair} on {day.isoformat()}: {exc}"
            ) from exc

        await asyncio.to_thread(self._cache.set, cache_key, price, self._default_ttl)
        return price

    async def get_coins_list(self) -> list[dict[str, Any]]:
        cache_key = "coins:list"
        cached = await asyncio.to_thread(self._cache.get, cache_key)
        if isinstance(cached, list) and cached:
            return cached

        try:
            coins = await self._client.coins_list()
        except CoinGeckoError as exc:
            raise PriceFetchError(f"Failed to fetch coins list: {exc}") from exc

        await asyncio.to_thread(self._cache.set, cache_key, coins, self._default_ttl)
        return coins


__all__ = ["CachedPriceSource"]
