"""FastAPI application entrypoint."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.dependencies.prices import get_cache_store
from app.api.routes import api_router
from app.config import get_settings
from app.core.errors import register_exception_handlers
from app.core.logging import setup_logging
from app.providers.coingecko import get_coingecko_client

logger = logging.getLogger(__name__)

settings = get_settings()
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Purge stale cache entries on boot and close the HTTP client on shutdown."""

    logger.info("Starting %s with settings %s", settings.app_name, settings.dict_for_logging())
    removed = await asyncio.to_thread(get_cache_store().clear_expired)
    logger.info("Removed %d expired cache entries at startup", removed)
    yield
    await get_coingecko_client().aclose()


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

# Allow common local development origins for the simulator UI.
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    """Return service readiness metadata."""

    return {
        "status": "ok",
        "timestamp": datetime.now().isoformat(),
    }


def configure_app() -> FastAPI:
    """Attach routes and dependencies."""

    app.include_router(api_router)
    register_exception_handlers(app)
    return app


configure_app()

__all__ = ["app", "configure_app"]
