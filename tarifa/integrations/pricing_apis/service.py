"""
Unified Pricing Service

Single entry point for the day's price curve.

Features:
- Today and tomorrow fetched concurrently
- Tomorrow degrades to an empty curve when not yet published
- Price summary (stats, category, best/worst hours) for a day
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo
import asyncio

import structlog

from tarifa.optimization.appliance_models import (
    HourlyPriceRecord,
    PriceCategory,
    PriceStats,
)
from tarifa.optimization.price_stats import (
    DEFAULT_TIMEZONE,
    calculate_price_stats,
    get_best_hours,
    get_price_category,
    get_worst_hours,
)

from .base import BasePricingClient, APIError
from .cache import CacheConfig, PriceCurveCache
from .ree import REEClient

logger = structlog.get_logger(__name__)


@dataclass
class DailyPrices:
    """Price curves for today and tomorrow"""

    today: List[HourlyPriceRecord]
    tomorrow: List[HourlyPriceRecord] = field(default_factory=list)


@dataclass
class PriceSummary:
    """A day's curve together with its statistics"""

    day: date
    prices: List[HourlyPriceRecord]
    stats: PriceStats
    category: PriceCategory
    best_hours: List[HourlyPriceRecord]
    worst_hours: List[HourlyPriceRecord]
    last_updated: datetime


class PricingService:
    """
    Service for accessing the hourly price curve.

    Example usage:
        ```python
        service = PricingService(REEClient())

        async with service:
            prices = await service.get_today_and_tomorrow()
            summary = await service.get_price_summary()
        ```
    """

    def __init__(
        self,
        client: BasePricingClient,
        tz_name: str = DEFAULT_TIMEZONE,
    ):
        """
        Initialize the pricing service.

        Args:
            client: Pricing API client providing daily curves
            tz_name: Timezone the market days are expressed in
        """
        self.client = client
        self.tz = ZoneInfo(tz_name)
        self.logger = logger.bind(component="pricing_service")

    async def __aenter__(self) -> "PricingService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying client"""
        await self.client.close()

    def now(self) -> datetime:
        """Current time in the market timezone"""
        return datetime.now(timezone.utc).astimezone(self.tz)

    async def get_prices(self, day: Optional[date] = None) -> List[HourlyPriceRecord]:
        """Get the price curve for a day (today when omitted)"""
        return await self.client.get_hourly_prices(day or self.now().date())

    async def get_today_and_tomorrow(
        self,
        now: Optional[datetime] = None,
    ) -> DailyPrices:
        """
        Get today's and tomorrow's curves.

        Tomorrow's prices are usually published in the afternoon, so a
        failure there yields an empty tomorrow. A failure for today is
        re-raised.

        Args:
            now: Reference time (defaults to the current market time)

        Returns:
            DailyPrices with records flagged ``is_tomorrow``
        """
        today = (now or self.now()).date()
        tomorrow = today + timedelta(days=1)

        today_result, tomorrow_result = await asyncio.gather(
            self.client.get_hourly_prices(today),
            self.client.get_hourly_prices(tomorrow),
            return_exceptions=True,
        )

        if isinstance(today_result, BaseException):
            self.logger.error(
                "today_prices_failed",
                day=today.isoformat(),
                error=str(today_result),
            )
            raise today_result

        if isinstance(tomorrow_result, BaseException):
            if not isinstance(tomorrow_result, APIError):
                raise tomorrow_result
            self.logger.info(
                "tomorrow_prices_unavailable",
                day=tomorrow.isoformat(),
                error=str(tomorrow_result),
            )
            tomorrow_result = []

        return DailyPrices(
            today=[replace(r, is_tomorrow=False) for r in today_result],
            tomorrow=[replace(r, is_tomorrow=True) for r in tomorrow_result],
        )

    async def get_price_summary(
        self,
        day: Optional[date] = None,
        current_hour: Optional[int] = None,
    ) -> PriceSummary:
        """
        Get the curve of a day with its statistics.

        Args:
            day: Day to summarize (today when omitted)
            current_hour: Hour treated as "now" (current market hour when omitted)

        Returns:
            PriceSummary
        """
        now = self.now()
        target_day = day or now.date()
        if current_hour is None:
            current_hour = now.hour

        prices = await self.client.get_hourly_prices(target_day)
        stats = calculate_price_stats(prices, current_hour=current_hour)

        return PriceSummary(
            day=target_day,
            prices=prices,
            stats=stats,
            category=get_price_category(stats.current, stats),
            best_hours=get_best_hours(prices),
            worst_hours=get_worst_hours(prices),
            last_updated=now,
        )


def create_pricing_service_from_settings() -> PricingService:
    """
    Factory function to create PricingService from application settings.

    Returns:
        Configured PricingService instance
    """
    from tarifa.config.settings import settings

    cache = PriceCurveCache(CacheConfig(price_curve_ttl=settings.price_cache_ttl_seconds))
    client = REEClient(
        base_url=settings.ree_api_base_url,
        endpoint=settings.ree_api_endpoint,
        cache=cache,
        timeout=settings.ree_api_timeout,
    )
    return PricingService(client, tz_name=settings.price_timezone)
