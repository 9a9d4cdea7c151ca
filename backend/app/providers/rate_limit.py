"""Minimum-spacing rate limiter for outbound API calls."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from dca_simulator.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class RateLimiter:
    """Keep at least ``min_interval`` seconds between consecutive calls.

    Each instance tracks its own last-call time, so independent clients (and
    tests) never share throttling state.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Clock | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock or SystemClock()
        self._sleep = sleep
        self._last_call: float | None = None
        self._lock = asyncio.Lock()

    @property
    def last_call(self) -> float | None:
        return self._last_call

    async def wait(self) -> float:
        """Sleep until the next call is allowed and return the time slept."""

        async with self._lock:
            delay = 0.0
            if self._last_call is not None:
                elapsed = self._clock.now() - self._last_call
                if elapsed < self.min_interval:
                    delay = self.min_interval - elapsed
            if delay > 0:
                logger.debug("Rate limit: sleeping %.2fs", delay)
                await self._sleep(delay)
            self._last_call = self._clock.now()
            return delay


__all__ = ["RateLimiter"]
