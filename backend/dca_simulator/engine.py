"""DCA simulation: schedule, price matching and running portfolio metrics."""
from __future__ import annotations

import asyncio
import logging
import math
from datetime import date
from typing import List, Protocol, Sequence

from .clock import Clock, SystemClock
from .errors import (
    ConfigurationError,
    DataAvailabilityError,
    PriceFetchError,
    SimulationError,
)
from .models import (
    AssetResult,
    Frequency,
    PricePoint,
    Purchase,
    SimulationConfig,
    SimulationResult,
    SummaryStats,
)
from .pricing import resolve_price
from .schedule import generate_purchase_dates, to_unix_timestamp

logger = logging.getLogger(__name__)

MAX_COMPARED_ASSETS = 5


class PriceSource(Protocol):
    """Where the engine gets its prices from."""

    async def get_historical_prices(
        self, asset_pair: str, from_timestamp: int, to_timestamp: int
    ) -> List[PricePoint]:
        ...

    async def get_current_price(self, asset_pair: str) -> float:
        ...


def validate_calculation_config(config: SimulationConfig) -> None:
    """Reject parameters that can never produce a meaningful simulation."""

    if not config.asset_pair:
        raise ConfigurationError("config", "Asset pair is required")
    if not isinstance(config.frequency, Frequency):
        raise ConfigurationError("config", f"Invalid frequency: {config.frequency}")
    amount = config.investment_amount
    if amount is None or not math.isfinite(amount) or amount <= 0:
        raise ConfigurationError("config", "Investment amount must be greater than 0")


def calculate_purchases(
    purchase_dates: Sequence[date],
    prices: Sequence[PricePoint],
    investment_amount: float,
    *,
    forward_only: bool = False,
) -> List[Purchase]:
    """Price every purchase date and attach running totals.

    Each purchase is marked to market at its own price, which gives a
    portfolio-value series suitable for charting.
    """

    purchases: List[Purchase] = []
    cumulative_quantity = 0.0
    for index, day in enumerate(purchase_dates, start=1):
        timestamp = to_unix_timestamp(day)
        price = resolve_price(timestamp, prices, forward_only=forward_only)
        if price is None:
            raise DataAvailabilityError("resolution", f"No price data found for {day.isoformat()}")
        if price <= 0:
            raise DataAvailabilityError("resolution", f"Invalid price {price} for {day.isoformat()}")
        quantity = investment_amount / price
        cumulative_quantity += quantity
        cumulative_invested = index * investment_amount
        portfolio_value = cumulative_quantity * price
        profit_loss = portfolio_value - cumulative_invested
        purchases.append(
            Purchase(
                date=day,
                timestamp=timestamp,
                price=price,
                amount_invested=investment_amount,
                quantity=quantity,
                cumulative_invested=cumulative_invested,
                cumulative_quantity=cumulative_quantity,
                portfolio_value=portfolio_value,
                profit_loss=profit_loss,
                profit_loss_percent=profit_loss / cumulative_invested * 100,
            )
        )
    return purchases


def calculate_metrics(
    config: SimulationConfig,
    purchases: Sequence[Purchase],
    current_price: float,
    *,
    end_date: date,
) -> SimulationResult:
    """Compute summary metrics from the purchases rather than their running fields."""

    if not purchases:
        raise ConfigurationError("schedule", "No purchases to summarise")
    count = len(purchases)
    total_invested = count * config.investment_amount
    total_quantity = math.fsum(p.quantity for p in purchases)
    current_value = total_quantity * current_price
    profit_loss = current_value - total_invested
    return SimulationResult(
        asset_pair=config.asset_pair,
        purchases=list(purchases),
        total_invested=total_invested,
        total_quantity=total_quantity,
        current_value=current_value,
        current_price=current_price,
        profit_loss=profit_loss,
        profit_loss_percent=profit_loss / total_invested * 100,
        average_price=total_invested / total_quantity,
        purchase_count=count,
        first_purchase_date=purchases[0].date,
        last_purchase_date=purchases[-1].date,
        start_date=config.start_date,
        end_date=end_date,
    )


def calculate_summary_stats(purchases: Sequence[Purchase]) -> SummaryStats:
    if not purchases:
        return SummaryStats()
    prices = [p.price for p in purchases]
    avg_price = math.fsum(prices) / len(prices)
    variance = math.fsum((p - avg_price) ** 2 for p in prices) / len(prices)
    return SummaryStats(
        min_price=min(prices),
        max_price=max(prices),
        avg_price=avg_price,
        price_volatility=math.sqrt(variance) / avg_price * 100,
    )


async def _fetch(stage_label: str, awaitable):
    try:
        return await awaitable
    except SimulationError:
        raise
    except Exception as exc:
        raise PriceFetchError(f"Failed to fetch {stage_label}: {exc}") from exc


async def calculate_dca(
    config: SimulationConfig,
    source: PriceSource,
    *,
    clock: Clock | None = None,
    forward_only: bool = False,
) -> SimulationResult:
    """Run a full DCA simulation for ``config`` against ``source``.

    Raises a ``SimulationError`` subclass naming the failing stage; never
    returns a partially populated result.
    """

    clock = clock or SystemClock()
    validate_calculation_config(config)
    end_date = config.end_date or clock.today()

    purchase_dates = generate_purchase_dates(config.start_date, end_date, config.frequency)
    if not purchase_dates:
        raise ConfigurationError(
            "schedule",
            "No purchase dates generated. Check your date range and frequency.",
        )

    from_timestamp = to_unix_timestamp(purchase_dates[0])
    to_timestamp = to_unix_timestamp(purchase_dates[-1])
    logger.info(
        "Simulating %s %s DCA of %s from %s to %s (%d purchases)",
        config.asset_pair,
        config.frequency.value,
        config.investment_amount,
        purchase_dates[0],
        purchase_dates[-1],
        len(purchase_dates),
    )
    prices = await _fetch(
        f"historical prices for {config.asset_pair}",
        source.get_historical_prices(config.asset_pair, from_timestamp, to_timestamp),
    )
    if not prices:
        raise DataAvailabilityError(
            "fetch",
            f"No price data available for {config.asset_pair} in the requested range",
        )
    prices = sorted(prices, key=lambda point: point.timestamp)

    purchases = calculate_purchases(
        purchase_dates,
        prices,
        config.investment_amount,
        forward_only=forward_only,
    )
    current_price = await _fetch(
        f"current price for {config.asset_pair}",
        source.get_current_price(config.asset_pair),
    )
    return calculate_metrics(config, purchases, current_price, end_date=end_date)


async def compare_assets(
    config: SimulationConfig,
    asset_pairs: Sequence[str],
    source: PriceSource,
    *,
    clock: Clock | None = None,
    forward_only: bool = False,
) -> List[AssetResult]:
    """Run the same DCA plan for several assets concurrently."""

    pairs = list(dict.fromkeys(asset_pairs))
    if not pairs:
        raise ConfigurationError("config", "At least one asset pair is required")
    if len(pairs) > MAX_COMPARED_ASSETS:
        raise ConfigurationError(
            "config", f"At most {MAX_COMPARED_ASSETS} assets can be compared"
        )
    clock = clock or SystemClock()
    end_date = config.end_date or clock.today()
    configs = [
        SimulationConfig(
            asset_pair=pair,
            start_date=config.start_date,
            investment_amount=config.investment_amount,
            frequency=config.frequency,
            end_date=end_date,
        )
        for pair in pairs
    ]
    results = await asyncio.gather(
        *(calculate_dca(c, source, clock=clock, forward_only=forward_only) for c in configs)
    )
    return [
        AssetResult(asset_pair=c.asset_pair, result=r, stats=calculate_summary_stats(r.purchases))
        for c, r in zip(configs, results)
    ]


__all__ = [
    "PriceSource",
    "MAX_COMPARED_ASSETS",
    "validate_calculation_config",
    "calculate_purchases",
    "calculate_metrics",
    "calculate_summary_stats",
    "calculate_dca",
    "compare_assets",
]
