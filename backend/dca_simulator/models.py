"""Domain models used by the DCA simulation engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional


class Frequency(str, Enum):
    """How often a simulated purchase happens."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class SimulationConfig:
    """Parameters of a single DCA simulation request."""

    asset_pair: str
    start_date: date
    investment_amount: float
    frequency: Frequency
    end_date: Optional[date] = None

    @property
    def asset(self) -> str:
        """Return the base asset symbol, e.g. ``BTC`` for ``BTC-USD``."""

        return self.asset_pair.split("-", 1)[0]

    @property
    def quote_currency(self) -> str:
        return self.asset_pair.split("-", 1)[-1]


@dataclass(frozen=True)
class PricePoint:
    """A single observed price, keyed by epoch seconds."""

    timestamp: int
    price: float

    @property
    def date(self) -> date:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc).date()


@dataclass(frozen=True)
class Purchase:
    """One simulated buy with running totals as of that buy."""

    date: date
    timestamp: int
    price: float
    amount_invested: float
    quantity: float
    cumulative_invested: float
    cumulative_quantity: float
    portfolio_value: float
    profit_loss: float
    profit_loss_percent: float


@dataclass(frozen=True)
class SimulationResult:
    """Purchases and final summary metrics of a DCA simulation."""

    asset_pair: str
    purchases: List[Purchase]
    total_invested: float
    total_quantity: float
    current_value: float
    current_price: float
    profit_loss: float
    profit_loss_percent: float
    average_price: float
    purchase_count: int
    first_purchase_date: date
    last_purchase_date: date
    start_date: date
    end_date: date


@dataclass(frozen=True)
class SummaryStats:
    """Spread of purchase prices across a simulation."""

    min_price: float = 0.0
    max_price: float = 0.0
    avg_price: float = 0.0
    price_volatility: float = 0.0


@dataclass(frozen=True)
class AssetResult:
    """Simulation outcome for one asset of a multi-asset comparison."""

    asset_pair: str
    result: SimulationResult
    stats: SummaryStats = field(default_factory=SummaryStats)
