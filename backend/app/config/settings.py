"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"
DEFAULT_CACHE_DATABASE_URL = "sqlite:///./dca_cache.db"


class AppSettings(BaseSettings):
    """Configuration options for the DCA simulator service."""

    app_name: str = Field(default="Crypto DCA Simulator")
    log_level: str = Field(default="INFO")

    coingecko_base_url: str = Field(default=DEFAULT_COINGECKO_BASE_URL)
    coingecko_api_key: str | None = Field(
        default=None,
        description="Optional CoinGecko demo/pro API key sent as x-cg-demo-api-key.",
    )
    rate_limit_delay_seconds: float = Field(default=1.2, ge=0.0)
    max_retries: int = Field(default=3, ge=0)
    retry_delay_seconds: float = Field(default=2.0, ge=0.0)
    request_timeout_seconds: float = Field(default=15.0, gt=0.0)

    cache_database_url: str = Field(
        default=DEFAULT_CACHE_DATABASE_URL,
        description="SQLAlchemy URL of the persistent price cache.",
    )
    cache_prefix: str = Field(default="crypto-dca-cache:")
    cache_default_ttl_seconds: float = Field(default=86400.0, gt=0.0)
    current_price_ttl_seconds: float = Field(default=300.0, gt=0.0)
    cache_max_size_bytes: int = Field(default=5_242_880, gt=0)
    cache_eviction_threshold: float = Field(default=0.8, gt=0.0, le=1.0)

    price_match: Literal["nearest", "forward"] = Field(
        default="nearest",
        description="nearest: closest observation either side; forward: next available only.",
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"coingecko_api_key"}
        return {k: ("***" if k in hidden and v else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_COINGECKO_BASE_URL",
    "DEFAULT_CACHE_DATABASE_URL",
    "get_settings",
]
