"""Simulation engine tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from dca_simulator.clock import FixedClock
from dca_simulator.engine import (
    calculate_dca,
    calculate_metrics,
    calculate_purchases,
    calculate_summary_stats,
    compare_assets,
)
from dca_simulator.errors import (
    ConfigurationError,
    DataAvailabilityError,
    PriceFetchError,
)
from dca_simulator.models import Frequency, PricePoint, SimulationConfig
from dca_simulator.schedule import generate_purchase_dates, to_unix_timestamp


class StubSource:
    def __init__(self, series: dict[str, list[PricePoint]], current: dict[str, float]) -> None:
        self.series = series
        self.current = current
        self.history_calls: list[tuple[str, int, int]] = []

    async def get_historical_prices(self, asset_pair: str, from_timestamp: int, to_timestamp: int):
        self.history_calls.append((asset_pair, from_timestamp, to_timestamp))
        return self.series.get(asset_pair, [])

    async def get_current_price(self, asset_pair: str) -> float:
        return self.current[asset_pair]


class FailingSource(StubSource):
    async def get_historical_prices(self, asset_pair: str, from_timestamp: int, to_timestamp: int):
        raise RuntimeError("connection reset")


def _points(*items: tuple[date, float]) -> list[PricePoint]:
    return [PricePoint(timestamp=to_unix_timestamp(d), price=p) for d, p in items]


def _config(**overrides) -> SimulationConfig:
    values = {
        "asset_pair": "BTC-USD",
        "start_date": date(2024, 1, 1),
        "investment_amount": 100.0,
        "frequency": Frequency.WEEKLY,
        "end_date": date(2024, 1, 8),
    }
    values.update(overrides)
    return SimulationConfig(**values)


async def test_weekly_two_purchase_example():
    source = StubSource(
        {"BTC-USD": _points((date(2024, 1, 1), 40000.0), (date(2024, 1, 8), 42000.0))},
        {"BTC-USD": 45000.0},
    )
    result = await calculate_dca(_config(), source)

    assert result.purchase_count == 2
    assert [p.quantity for p in result.purchases] == pytest.approx([0.0025, 0.00238095], rel=1e-5)
    assert result.total_invested == 200
    assert result.total_quantity == pytest.approx(0.00488095, rel=1e-5)
    assert result.current_value == pytest.approx(219.64, abs=0.01)
    assert result.profit_loss == pytest.approx(19.64, abs=0.01)
    assert result.profit_loss_percent == pytest.approx(9.82, abs=0.01)
    assert result.average_price == pytest.approx(200 / 0.00488095, rel=1e-5)
    assert result.first_purchase_date == date(2024, 1, 1)
    assert result.last_purchase_date == date(2024, 1, 8)
    assert source.history_calls == [
        ("BTC-USD", to_unix_timestamp(date(2024, 1, 1)), to_unix_timestamp(date(2024, 1, 8)))
    ]


async def test_running_totals_use_each_purchase_price():
    source = StubSource(
        {"BTC-USD": _points((date(2024, 1, 1), 40000.0), (date(2024, 1, 8), 42000.0))},
        {"BTC-USD": 45000.0},
    )
    result = await calculate_dca(_config(), source)
    second = result.purchases[1]

    assert second.cumulative_invested == 200
    assert second.cumulative_quantity == pytest.approx(0.0025 + 100 / 42000)
    assert second.portfolio_value == pytest.approx(second.cumulative_quantity * 42000)
    assert second.profit_loss == pytest.approx(second.portfolio_value - 200)
    assert second.profit_loss_percent == pytest.approx(second.profit_loss / 200 * 100)


async def test_summary_invariants_hold_for_long_daily_run():
    start = date(2023, 1, 1)
    dates = generate_purchase_dates(start, date(2023, 12, 31), Frequency.DAILY)
    series = [
        PricePoint(timestamp=to_unix_timestamp(d), price=20000.0 + 37.3 * i)
        for i, d in enumerate(dates)
    ]
    source = StubSource({"BTC-USD": series}, {"BTC-USD": 42000.0})
    config = _config(
        start_date=start,
        end_date=date(2023, 12, 31),
        frequency=Frequency.DAILY,
        investment_amount=33.33,
    )
    result = await calculate_dca(config, source)

    assert result.purchase_count == 365
    assert result.total_invested == 365 * 33.33
    assert result.current_value == result.total_quantity * result.current_price
    assert result.profit_loss == result.current_value - result.total_invested


async def test_end_date_defaults_to_clock_today():
    clock = FixedClock(to_unix_timestamp(date(2024, 1, 15)) + 3600)
    source = StubSource(
        {"BTC-USD": _points((date(2024, 1, 1), 40000.0), (date(2024, 1, 15), 41000.0))},
        {"BTC-USD": 45000.0},
    )
    result = await calculate_dca(_config(end_date=None), source, clock=clock)

    assert result.end_date == date(2024, 1, 15)
    assert [p.date for p in result.purchases] == [date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 15)]


async def test_start_after_end_is_configuration_error():
    source = StubSource({}, {})
    with pytest.raises(ConfigurationError) as excinfo:
        await calculate_dca(_config(start_date=date(2024, 2, 1), end_date=date(2024, 1, 1)), source)
    assert excinfo.value.stage == "schedule"
    assert source.history_calls == []


@pytest.mark.parametrize("amount", [0.0, -5.0, float("nan")])
async def test_non_positive_amount_is_rejected(amount):
    with pytest.raises(ConfigurationError):
        await calculate_dca(_config(investment_amount=amount), StubSource({}, {}))


async def test_empty_series_is_data_availability_error():
    source = StubSource({"BTC-USD": []}, {"BTC-USD": 45000.0})
    with pytest.raises(DataAvailabilityError) as excinfo:
        await calculate_dca(_config(), source)
    assert excinfo.value.stage == "fetch"


async def test_purchase_inside_gap_uses_nearest_price():
    source = StubSource(
        {
            "BTC-USD": _points(
                (date(2024, 1, 1), 40000.0),
                (date(2024, 1, 2), 40500.0),
                (date(2024, 1, 16), 43000.0),
            )
        },
        {"BTC-USD": 45000.0},
    )
    result = await calculate_dca(_config(end_date=date(2024, 1, 15)), source)

    assert [p.price for p in result.purchases] == [40000.0, 40500.0, 43000.0]


async def test_forward_only_fails_when_no_later_price():
    source = StubSource(
        {"BTC-USD": _points((date(2024, 1, 1), 40000.0))},
        {"BTC-USD": 45000.0},
    )
    with pytest.raises(DataAvailabilityError) as excinfo:
        await calculate_dca(_config(), source, forward_only=True)
    assert excinfo.value.stage == "resolution"


async def test_upstream_failure_propagates_as_fetch_error():
    with pytest.raises(PriceFetchError) as excinfo:
        await calculate_dca(_config(), FailingSource({}, {}))
    assert "connection reset" in str(excinfo.value)
    assert excinfo.value.stage == "fetch"


def test_calculate_purchases_rejects_empty_series():
    with pytest.raises(DataAvailabilityError):
        calculate_purchases([date(2024, 1, 1)], [], 100.0)


def test_calculate_metrics_from_first_principles():
    purchases = calculate_purchases(
        [date(2024, 1, 1), date(2024, 1, 2)],
        _points((date(2024, 1, 1), 10.0), (date(2024, 1, 2), 20.0)),
        50.0,
    )
    result = calculate_metrics(_config(investment_amount=50.0), purchases, 40.0, end_date=date(2024, 1, 2))

    assert result.total_quantity == pytest.approx(7.5)
    assert result.current_value == pytest.approx(300.0)
    assert result.profit_loss == pytest.approx(200.0)
    assert result.average_price == pytest.approx(100 / 7.5)


def test_summary_stats():
    purchases = calculate_purchases(
        [date(2024, 1, 1), date(2024, 1, 2)],
        _points((date(2024, 1, 1), 10.0), (date(2024, 1, 2), 30.0)),
        50.0,
    )
    stats = calculate_summary_stats(purchases)

    assert stats.min_price == 10.0
    assert stats.max_price == 30.0
    assert stats.avg_price == 20.0
    assert stats.price_volatility == pytest.approx(50.0)
    assert calculate_summary_stats([]).avg_price == 0.0


async def test_compare_assets_runs_each_pair():
    source = StubSource(
        {
            "BTC-USD": _points((date(2024, 1, 1), 40000.0), (date(2024, 1, 8), 42000.0)),
            "ETH-USD": _points((date(2024, 1, 1), 2000.0), (date(2024, 1, 8), 2500.0)),
        },
        {"BTC-USD": 45000.0, "ETH-USD": 2400.0},
    )
    results = await compare_assets(_config(), ["BTC-USD", "ETH-USD", "BTC-USD"], source)

    assert [r.asset_pair for r in results] == ["BTC-USD", "ETH-USD"]
    assert results[1].result.total_quantity == pytest.approx(0.05 + 0.04)
    assert results[1].stats.max_price == 2500.0


async def test_compare_assets_limits_pair_count():
    pairs = ["BTC-USD", "ETH-USD", "SOL-USD", "ADA-USD", "XRP-USD", "DOT-USD"]
    with pytest.raises(ConfigurationError):
        await compare_assets(_config(), pairs, StubSource({}, {}))


async def test_compare_assets_propagates_failures():
    source = StubSource(
        {"BTC-USD": _points((date(2024, 1, 1), 40000.0))},
        {"BTC-USD": 45000.0},
    )
    with pytest.raises(DataAvailabilityError):
        await compare_assets(_config(end_date=date(2024, 1, 1) + timedelta(days=7)), ["BTC-USD", "ETH-USD"], source)
