"""Clock tests."""

from __future__ import annotations

from datetime import date, datetime, timezone

from dca_simulator.clock import FixedClock, SystemClock
from dca_simulator.schedule import to_unix_timestamp


def test_system_clock_today_is_the_utc_date_of_now():
    clock = SystemClock()
    now = clock.now()
    today = clock.today()
    assert today in {
        datetime.fromtimestamp(now, tz=timezone.utc).date(),
        datetime.now(timezone.utc).date(),
    }


def test_fixed_clock_today_matches_utc_midnight_timestamps():
    midnight = to_unix_timestamp(date(2024, 3, 10))
    clock = FixedClock(midnight + 86399)
    assert clock.today() == date(2024, 3, 10)
    clock.advance(1)
    assert clock.today() == date(2024, 3, 11)
