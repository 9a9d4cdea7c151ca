"""CoinGecko client used by the price source."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable

import httpx

from app.config import AppSettings, get_settings
from app.providers.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

BASE_URL = "https://api.coingecko.com/api/v3"
HTTP_STATUS_TOO_MANY_REQUESTS = 429

# Common tickers whose CoinGecko id is not simply the lower-cased symbol.
COIN_ID_MAP: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "BNB": "binancecoin",
    "ADA": "cardano",
    "SOL": "solana",
    "XRP": "ripple",
    "DOT": "polkadot",
    "DOGE": "dogecoin",
    "AVAX": "avalanche-2",
    "MATIC": "matic-network",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "LTC": "litecoin",
    "BCH": "bitcoin-cash",
}


class CoinGeckoError(RuntimeError):
    """Raised when CoinGecko returns an error or an unexpected payload."""


@dataclass(frozen=True)
class AssetPair:
    coin_id: str
    vs_currency: str


def parse_asset_pair(asset_pair: str) -> AssetPair:
    """Map ``BTC-USD`` style pairs to CoinGecko's coin id and quote currency."""

    parts = asset_pair.split("-")
    if len(parts) != 2:
        raise CoinGeckoError(
            f"Invalid asset pair format: {asset_pair}. Expected format: ASSET-CURRENCY"
        )
    asset, currency = parts
    if not asset or not currency:
        raise CoinGeckoError(
            f"Invalid asset pair format: {asset_pair}. Both asset and currency are required."
        )
    asset = asset.upper()
    return AssetPair(coin_id=COIN_ID_MAP.get(asset, asset.lower()), vs_currency=currency.lower())


class CoinGeckoClient:
    """Throttled CoinGecko client with retry on rate limiting and transport errors."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = BASE_URL,
        rate_limiter: RateLimiter | None = None,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        timeout: float = 15.0,
        client: Any | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._rate_limiter = rate_limiter or RateLimiter(1.2)
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._timeout = timeout
        self._sleep = sleep
        headers = {"accept": "application/json"}
        if api_key:
            headers["x-cg-demo-api-key"] = api_key
        self._client = client or httpx.AsyncClient(headers=headers)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "CoinGeckoClient":
        return cls(
            settings.coingecko_api_key,
            base_url=settings.coingecko_base_url,
            rate_limiter=RateLimiter(settings.rate_limit_delay_seconds),
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay_seconds,
            timeout=settings.request_timeout_seconds,
        )

    async def _request(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        retries = self._max_retries
        while True:
            await self._rate_limiter.wait()
            try:
                response = await self._client.get(url, params=params or {}, timeout=self._timeout)
            except httpx.HTTPError as exc:
                if retries > 0:
                    retries -= 1
                    logger.warning("CoinGecko request to %s failed (%s); retrying", path, exc)
                    await self._sleep(self._retry_delay)
                    continue
                raise CoinGeckoError(f"Failed to reach CoinGecko: {exc}") from exc

            status_code = response.status_code
            if status_code == HTTP_STATUS_TOO_MANY_REQUESTS or status_code >= 500:
                if retries > 0:
                    retries -= 1
                    logger.warning("CoinGecko returned %s for %s; retrying", status_code, path)
                    await self._sleep(self._retry_delay)
                    continue
            if status_code >= 400:
                raise CoinGeckoError(f"API request failed: {status_code}")
            try:
                return response.json()
            except ValueError as exc:
                raise CoinGeckoError("CoinGecko returned invalid JSON payload") from exc

    async def market_chart_range(
        self, coin_id: str, vs_currency: str, from_timestamp: int, to_timestamp: int
    ) -> list[tuple[int, float]]:
        """Return ``(epoch_seconds, price)`` pairs for the range."""

        payload = await self._request(
            f"/coins/{coin_id}/market_chart/range",
            {"vs_currency": vs_currency, "from": from_timestamp, "to": to_timestamp},
        )
        prices = payload.get("prices") if isinstance(payload, dict) else None
        if not isinstance(prices, list):
            raise CoinGeckoError("Invalid response format from CoinGecko API")
        points: list[tuple[int, float]] = []
        for item in prices:
            if not isinstance(item, (list, tuple)) or len(item) < 2 or item[1] is None:
                continue
            points.append((int(item[0]) // 1000, float(item[1])))
        return points

    async def simple_price(self, coin_id: str, vs_currency: str) -> float:
        payload = await self._request(
            "/simple/price", {"ids": coin_id, "vs_currencies": vs_currency}
        )
        try:
            return float(payload[coin_id][vs_currency])
        except (KeyError, TypeError, ValueError) as exc:
            raise CoinGeckoError(f"Price not found for {coin_id}/{vs_currency}") from exc

    async def coin_history(self, coin_id: str, vs_currency: str, day: date) -> float:
        """Return the recorded price of ``coin_id`` on ``day``."""

        payload = await self._request(
            f"/coins/{coin_id}/history", {"date": day.strftime("%d-%m-%Y")}
        )
        try:
            return float(payload["market_data"]["current_price"][vs_currency])
        except (KeyError, TypeError, ValueError) as exc:
            raise CoinGeckoError(
                f"Price not found for {coin_id}/{vs_currency} on {day.isoformat()}"
            ) from exc

    async def coins_list(self) -> list[dict[str, Any]]:
        payload = await self._request("/coins/list")
        if not isinstance(payload, list):
            raise CoinGeckoError("Invalid response format from CoinGecko API")
        return payload

    async def aclose(self) -> None:
        await self._client.aclose()


_client: CoinGeckoClient | None = None


def get_coingecko_client() -> CoinGeckoClient:
    """Return the process-wide client built from settings."""

    global _client  # noqa: PLW0603 - lazily created shared client
    if _client is None:
        _client = CoinGeckoClient.from_settings(get_settings())
    return _client


__all__ = [
    "AssetPair",
    "COIN_ID_MAP",
    "CoinGeckoClient",
    "CoinGeckoError",
    "get_coingecko_client",
    "parse_asset_pair",
]
