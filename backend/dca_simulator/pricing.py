"""Price lookup for purchase dates in a gapped price series."""
from __future__ import annotations

from typing import Optional, Sequence

from .models import PricePoint


def find_closest_point(
    target_timestamp: int,
    series: Sequence[PricePoint],
    *,
    forward_only: bool = False,
) -> Optional[PricePoint]:
    """Return the point nearest to ``target_timestamp``.

    Ties keep the earlier candidate in series order. With ``forward_only`` only
    points at or after the target are eligible.
    """

    closest: Optional[PricePoint] = None
    min_diff = 0
    for point in series:
        if forward_only and point.timestamp < target_timestamp:
            continue
        diff = abs(point.timestamp - target_timestamp)
        if closest is None or diff < min_diff:
            closest = point
            min_diff = diff
    return closest


def resolve_price(
    target_timestamp: int,
    series: Sequence[PricePoint],
    *,
    forward_only: bool = False,
) -> Optional[float]:
    """Return the price to use for a purchase at ``target_timestamp``, or ``None``."""

    point = find_closest_point(target_timestamp, series, forward_only=forward_only)
    if point is None:
        return None
    return point.price


__all__ = ["find_closest_point", "resolve_price"]
