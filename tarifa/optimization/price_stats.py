"""
Price Curve Statistics and Categorization

Derives min/max/average/current/percentile figures from a day's hourly price
curve and maps individual prices onto a three-tier category
(cheap / normal / expensive) relative to the day's range.

The "current hour" is always a parameter so that results are reproducible;
only the default falls back to the wall clock.
"""

from datetime import datetime
from typing import List, Optional, Sequence
from zoneinfo import ZoneInfo

import numpy as np

from tarifa.optimization.appliance_models import (
    HourlyPriceRecord,
    PriceCategory,
    PriceStats,
)
from tarifa.optimization.exceptions import InvalidInputError


DEFAULT_TIMEZONE = "Europe/Madrid"

# Upper bounds (inclusive) of the cheap and normal tiers, in percent of range
CHEAP_THRESHOLD = 33.0
NORMAL_THRESHOLD = 66.0


def current_hour_in(timezone: str = DEFAULT_TIMEZONE) -> int:
    """Get the wall-clock hour in the market's timezone."""
    return datetime.now(ZoneInfo(timezone)).hour


def _range_position(price: float, low: float, high: float) -> float:
    """Position of a price within [low, high] as 0-100; 0 for a flat range."""
    if high == low:
        return 0.0
    return (price - low) / (high - low) * 100


def calculate_price_stats(
    prices: Sequence[HourlyPriceRecord],
    current_hour: Optional[int] = None,
) -> PriceStats:
    """Calculate summary statistics for a price curve.

    Args:
        prices: Hourly price records (any order)
        current_hour: Hour treated as "now"; defaults to the wall clock

    Returns:
        PriceStats for the curve

    Raises:
        InvalidInputError: If the curve is empty
    """
    if not prices:
        raise InvalidInputError("Cannot calculate stats from empty price data")

    if current_hour is None:
        current_hour = current_hour_in()

    values = np.array([p.price_per_kwh for p in prices], dtype=np.float64)
    low = float(np.min(values))
    high = float(np.max(values))
    average = float(np.mean(values))

    current = next((p for p in prices if p.hour == current_hour), prices[0])

    return PriceStats(
        min=low,
        max=high,
        # mean can drift outside [min, max] by an ulp on a flat curve
        average=min(max(average, low), high),
        current=current.price_per_kwh,
        percentile=_range_position(current.price_per_kwh, low, high),
    )


def get_price_category(price: float, stats: PriceStats) -> PriceCategory:
    """Classify a price relative to the day's range.

    Args:
        price: Price in EUR/kWh
        stats: Statistics of the curve the price belongs to

    Returns:
        CHEAP up to 33% of the range, NORMAL up to 66%, EXPENSIVE above
    """
    position = _range_position(price, stats.min, stats.max)

    if position <= CHEAP_THRESHOLD:
        return PriceCategory.CHEAP
    if position <= NORMAL_THRESHOLD:
        return PriceCategory.NORMAL
    return PriceCategory.EXPENSIVE


def sort_by_price(prices: Sequence[HourlyPriceRecord]) -> List[HourlyPriceRecord]:
    """Order records cheapest first; equal prices keep ascending hour order."""
    by_hour = sorted(prices, key=lambda p: p.hour)
    values = np.array([p.price_per_kwh for p in by_hour], dtype=np.float64)
    return [by_hour[i] for i in np.argsort(values, kind="stable")]


def get_best_hours(
    prices: Sequence[HourlyPriceRecord],
    count: int = 3,
) -> List[HourlyPriceRecord]:
    """Get the `count` cheapest hours, cheapest first."""
    return sort_by_price(prices)[:count]


def get_worst_hours(
    prices: Sequence[HourlyPriceRecord],
    count: int = 3,
) -> List[HourlyPriceRecord]:
    """Get the `count` most expensive hours, most expensive first."""
    by_hour = sorted(prices, key=lambda p: p.hour)
    return sorted(by_hour, key=lambda p: p.price_per_kwh, reverse=True)[:count]
