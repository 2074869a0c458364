"""
Price API Endpoints

Hourly PVPC price curve: a single day, today and tomorrow together, and the
day summary with statistics and best/worst hours.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from tarifa.api.dependencies import get_pricing_service
from tarifa.integrations.pricing_apis import PricingService
from tarifa.models.price import (
    DailyPricesResponse,
    HourlyPriceResponse,
    PriceCurveResponse,
    PriceStatsResponse,
    PriceSummaryResponse,
)

import structlog

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=PriceCurveResponse,
    summary="Get the hourly price curve of a day",
    responses={
        200: {"description": "24 hourly prices in EUR/kWh"},
        503: {"description": "Price feed unavailable and nothing cached"},
    },
)
async def get_prices(
    day: Optional[date] = Query(None, description="Day (YYYY-MM-DD), today when omitted"),
    pricing: PricingService = Depends(get_pricing_service),
):
    """
    Get the price curve for a day.
    """
    target_day = day or pricing.now().date()
    records = await pricing.get_prices(target_day)

    return PriceCurveResponse(
        day=target_day,
        prices=[HourlyPriceResponse.from_record(r) for r in records],
    )


@router.get(
    "/today-tomorrow",
    response_model=DailyPricesResponse,
    summary="Get today's and tomorrow's curves",
)
async def get_today_and_tomorrow(
    pricing: PricingService = Depends(get_pricing_service),
):
    """
    Get today's curve and, once published, tomorrow's.

    Tomorrow is an empty list until REE publishes it.
    """
    daily = await pricing.get_today_and_tomorrow()

    return DailyPricesResponse(
        today=[HourlyPriceResponse.from_record(r) for r in daily.today],
        tomorrow=[HourlyPriceResponse.from_record(r) for r in daily.tomorrow],
    )


@router.get(
    "/summary",
    response_model=PriceSummaryResponse,
    summary="Get the price summary of a day",
)
async def get_price_summary(
    day: Optional[date] = Query(None, description="Day (YYYY-MM-DD), today when omitted"),
    hour: Optional[int] = Query(None, ge=0, le=23, description="Hour treated as current"),
    pricing: PricingService = Depends(get_pricing_service),
):
    """
    Get the curve with min/max/average, the category of the current price
    and the three cheapest and most expensive hours.
    """
    summary = await pricing.get_price_summary(day=day, current_hour=hour)

    logger.debug(
        "price_summary_served",
        day=summary.day.isoformat(),
        category=summary.category.value,
    )

    return PriceSummaryResponse(
        day=summary.day,
        prices=[HourlyPriceResponse.from_record(r) for r in summary.prices],
        stats=PriceStatsResponse.from_stats(summary.stats),
        category=summary.category,
        category_label=summary.category.label,
        best_hours=[HourlyPriceResponse.from_record(r) for r in summary.best_hours],
        worst_hours=[HourlyPriceResponse.from_record(r) for r in summary.worst_hours],
        last_updated=summary.last_updated,
    )
