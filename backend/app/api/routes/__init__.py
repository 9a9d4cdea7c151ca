"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .cache import router as cache_router
from .simulate import router as simulate_router

api_router = APIRouter()
api_router.include_router(simulate_router, prefix="/simulate", tags=["simulate"])
api_router.include_router(cache_router, prefix="/cache", tags=["cache"])

__all__ = ["api_router"]
