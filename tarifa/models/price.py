"""
Price Data Models

Pydantic response models for the hourly price curve.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tarifa.optimization.appliance_models import (
    HourlyPriceRecord,
    PriceCategory,
    PriceStats,
)


class HourlyPriceResponse(BaseModel):
    """Response schema for one hour of the curve"""

    model_config = ConfigDict(from_attributes=True)

    hour: int = Field(..., ge=0, le=23)
    timestamp: Optional[datetime] = None
    price_per_kwh: float
    price_raw_per_mwh: Optional[float] = None
    is_tomorrow: bool = False

    @classmethod
    def from_record(cls, record: HourlyPriceRecord) -> "HourlyPriceResponse":
        return cls(
            hour=record.hour,
            timestamp=record.timestamp,
            price_per_kwh=record.price_per_kwh,
            price_raw_per_mwh=record.price_raw_per_mwh,
            is_tomorrow=record.is_tomorrow,
        )


class PriceStatsResponse(BaseModel):
    """Response schema for curve statistics (EUR/kWh)"""

    min: float
    max: float
    average: float
    current: float
    percentile: float = Field(..., ge=0, le=100)

    @classmethod
    def from_stats(cls, stats: PriceStats) -> "PriceStatsResponse":
        return cls(**stats.to_dict())


class PriceCurveResponse(BaseModel):
    """Response schema for a day's curve"""

    day: date
    prices: List[HourlyPriceResponse]


class DailyPricesResponse(BaseModel):
    """Response schema for today's and tomorrow's curves"""

    today: List[HourlyPriceResponse]
    tomorrow: List[HourlyPriceResponse]


class PriceSummaryResponse(BaseModel):
    """Response schema for the price summary"""

    day: date
    prices: List[HourlyPriceResponse]
    stats: PriceStatsResponse
    category: PriceCategory
    category_label: str
    best_hours: List[HourlyPriceResponse]
    worst_hours: List[HourlyPriceResponse]
    last_updated: datetime
