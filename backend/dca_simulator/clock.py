"""Time sources for the simulator and the cache."""
from __future__ import annotations

import time
from datetime import date, datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> float:
        """Return the current time as epoch seconds."""

    def today(self) -> date:
        """Return the current calendar date."""


class SystemClock:
    """Wall-clock time."""

    def now(self) -> float:
        return time.time()

    def today(self) -> date:
        return datetime.now(timezone.utc).date()


class FixedClock:
    """A manually advanced clock, used for replaying simulations and in tests."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)

    @classmethod
    def at(cls, moment: datetime) -> "FixedClock":
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return cls(moment.timestamp())

    def now(self) -> float:
        return self._now

    def today(self) -> date:
        return datetime.fromtimestamp(self._now, tz=timezone.utc).date()

    def advance(self, seconds: float) -> None:
        self._now += seconds


__all__ = ["Clock", "SystemClock", "FixedClock"]
