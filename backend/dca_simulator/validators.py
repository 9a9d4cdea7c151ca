"""Field validation for simulation input."""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, Optional

from .models import Frequency

ASSET_PAIR_PATTERN = re.compile(r"^[A-Z]{3,5}-[A-Z]{3}$")
MIN_INVESTMENT = 1
MAX_INVESTMENT = 1_000_000
MIN_START_DATE = date(2010, 1, 1)
VALID_FREQUENCIES = tuple(f.value for f in Frequency)


def validate_asset_pair(asset_pair: Any) -> Optional[str]:
    if not asset_pair or not isinstance(asset_pair, str):
        return "Asset pair is required"
    if not ASSET_PAIR_PATTERN.match(asset_pair):
        return "Asset pair must be in format XXX-YYY (e.g., BTC-USD, ETH-EUR)"
    return None


def validate_investment_amount(amount: Any) -> Optional[str]:
    if amount is None or amount == "":
        return "Investment amount is required"
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return "Investment amount must be a number"
    if value != value:
        return "Investment amount must be a number"
    if value < MIN_INVESTMENT:
        return f"Investment amount must be at least ${MIN_INVESTMENT}"
    if value > MAX_INVESTMENT:
        return f"Investment amount cannot exceed ${MAX_INVESTMENT:,}"
    return None


def validate_frequency(frequency: Any) -> Optional[str]:
    if not frequency:
        return "Frequency is required"
    value = frequency.value if isinstance(frequency, Frequency) else frequency
    if value not in VALID_FREQUENCIES:
        return f"Frequency must be one of: {', '.join(VALID_FREQUENCIES)}"
    return None


def validate_start_date(value: Any, today: date) -> Optional[str]:
    """Check the start date lies between 2010-01-01 and ``today``."""

    if not value:
        return "Start date is required"
    if isinstance(value, datetime):
        start = value.date()
    elif isinstance(value, date):
        start = value
    else:
        try:
            start = date.fromisoformat(str(value))
        except ValueError:
            return "Invalid date format"
    if start > today:
        return "Cannot simulate future dates"
    if start < MIN_START_DATE:
        return "Start date must be after January 1, 2010 (historical data limitation)"
    return None


def validate_simulation_config(
    *,
    asset_pair: Any,
    start_date: Any,
    investment_amount: Any,
    frequency: Any,
    today: date,
) -> Dict[str, str]:
    """Return field errors keyed by their camelCase input names; empty when valid."""

    checks = {
        "assetPair": validate_asset_pair(asset_pair),
        "startDate": validate_start_date(start_date, today),
        "investmentAmount": validate_investment_amount(investment_amount),
        "frequency": validate_frequency(frequency),
    }
    return {field: error for field, error in checks.items() if error}


__all__ = [
    "ASSET_PAIR_PATTERN",
    "MIN_INVESTMENT",
    "MAX_INVESTMENT",
    "MIN_START_DATE",
    "validate_asset_pair",
    "validate_investment_amount",
    "validate_frequency",
    "validate_start_date",
    "validate_simulation_config",
]
