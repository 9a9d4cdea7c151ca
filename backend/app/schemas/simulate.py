"""Schemas for DCA simulation requests and results."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from dca_simulator.models import Frequency, SimulationConfig
from dca_simulator.validators import (
    ASSET_PAIR_PATTERN,
    MAX_INVESTMENT,
    MIN_INVESTMENT,
    validate_asset_pair,
    validate_frequency,
    validate_investment_amount,
    validate_start_date,
)


def _ensure(error: Optional[str], value: Any) -> Any:
    if error:
        raise ValueError(error)
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SimulationRequest(_CamelModel):
    """Parameters of a single DCA simulation.

    The start date is only checked against the lower bound here; whether it
    lies in the future depends on the request clock and is checked by the route.
    """

    asset_pair: str = Field(..., pattern=ASSET_PAIR_PATTERN.pattern, description="Pair such as BTC-USD")
    start_date: date
    investment_amount: float = Field(..., ge=MIN_INVESTMENT, le=MAX_INVESTMENT)
    frequency: Frequency
    end_date: Optional[date] = None

    @field_validator("asset_pair", mode="before")
    @classmethod
    def check_asset_pair(cls, value: Any) -> Any:
        return _ensure(validate_asset_pair(value), value)

    @field_validator("investment_amount", mode="before")
    @classmethod
    def check_investment_amount(cls, value: Any) -> Any:
        return _ensure(validate_investment_amount(value), value)

    @field_validator("frequency", mode="before")
    @classmethod
    def check_frequency(cls, value: Any) -> Any:
        return _ensure(validate_frequency(value), value)

    @field_validator("start_date")
    @classmethod
    def check_start_date(cls, value: date) -> date:
        return _ensure(validate_start_date(value, date.max), value)

    def to_config(self) -> SimulationConfig:
        return SimulationConfig(
            asset_pair=self.asset_pair,
            start_date=self.start_date,
            investment_amount=self.investment_amount,
            frequency=self.frequency,
            end_date=self.end_date,
        )


class ComparisonRequest(SimulationRequest):
    asset_pair: str = ""
    asset_pairs: list[str] = Field(..., min_length=1)

    @field_validator("asset_pairs")
    @classmethod
    def check_asset_pairs(cls, value: list[str]) -> list[str]:
        errors = []
        for pair in value:
            error = validate_asset_pair(pair)
            if error:
                errors.append(f"{pair}: {error}")
        if errors:
            raise ValueError("; ".join(errors))
        return value


class PurchaseSchema(_CamelModel):
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


class SimulationResponse(_CamelModel):
    asset_pair: str
    purchases: list[PurchaseSchema]
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


class SummaryStatsSchema(_CamelModel):
    min_price: float
    max_price: float
    avg_price: float
    price_volatility: float


class AssetResultSchema(_CamelModel):
    asset_pair: str
    result: SimulationResponse
    stats: SummaryStatsSchema


class ComparisonResponse(_CamelModel):
    results: list[AssetResultSchema]


__all__ = [
    "AssetResultSchema",
    "ComparisonRequest",
    "ComparisonResponse",
    "PurchaseSchema",
    "SimulationRequest",
    "SimulationResponse",
    "SummaryStatsSchema",
]
