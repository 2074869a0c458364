"""
REE (Red Eléctrica de España) API Client

Provides access to the Spanish PVPC hourly electricity prices published on
the REE open data platform.

API Documentation: https://www.ree.es/en/apidatos
Endpoint: mercados/precios-mercados-tiempo-real, hourly granularity

Prices arrive in EUR/MWh and are converted to EUR/kWh.
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional

import structlog

from tarifa.optimization.appliance_models import (
    HOURS_PER_DAY,
    HourlyPriceRecord,
    convert_mwh_to_kwh,
)

from .base import (
    BasePricingClient,
    APIError,
    PriceParseError,
    RetryConfig,
)
from .cache import PriceCurveCache

logger = structlog.get_logger(__name__)


DEFAULT_BASE_URL = "https://apidatos.ree.es"
DEFAULT_ENDPOINT = "es/datos/mercados/precios-mercados-tiempo-real"

# Substrings identifying the price series among the included series
PRICE_MAGNITUDE_MARKERS = ("price",)
PRICE_TITLE_MARKERS = ("pvpc", "precio")


class REEClient(BasePricingClient):
    """
    Client for the REE market price API.

    Fetched curves are cached per day. When a fetch fails, a cached curve is
    returned even if it has expired; without one the error propagates.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        endpoint: str = DEFAULT_ENDPOINT,
        cache: Optional[PriceCurveCache] = None,
        timeout: float = 15.0,
        retry_config: Optional[RetryConfig] = None,
    ):
        """
        Initialize the REE client.

        Args:
            base_url: API base URL
            endpoint: Path of the real-time market prices dataset
            cache: Price curve cache (a private one is created when omitted)
            timeout: Request timeout in seconds
            retry_config: Custom retry configuration
        """
        super().__init__(
            base_url=base_url,
            client_name="ree",
            timeout=timeout,
            retry_config=retry_config,
        )
        self.endpoint = endpoint
        self.cache = cache or PriceCurveCache()

    def _get_default_headers(self) -> dict[str, str]:
        """Get default headers for REE API"""
        return {
            "Accept": "application/json",
            "User-Agent": "Tarifa/1.0",
        }

    @staticmethod
    def _build_params(day: date) -> dict[str, str]:
        """Query covering one whole day at hourly granularity"""
        day_str = day.isoformat()
        return {
            "start_date": f"{day_str}T00:00",
            "end_date": f"{day_str}T23:59",
            "time_trunc": "hour",
        }

    async def get_hourly_prices(self, day: date) -> List[HourlyPriceRecord]:
        """
        Get the 24-hour price curve for a day.

        Args:
            day: Calendar day to fetch

        Returns:
            Exactly 24 HourlyPriceRecord, one per hour

        Raises:
            APIError: If the fetch fails and nothing is cached for the day
        """
        cache_key = day.isoformat()

        cached = await self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            response = await self.get(self.endpoint, params=self._build_params(day))
            try:
                payload = response.json()
            except ValueError as e:
                raise PriceParseError(
                    message="Response is not valid JSON",
                    api_name=self.client_name,
                ) from e
            try:
                records = self._parse_price_response(payload, day)
            except (AttributeError, TypeError, ValueError) as e:
                raise PriceParseError(
                    message=f"Malformed price response: {e}",
                    api_name=self.client_name,
                ) from e

        except APIError as e:
            stale = await self.cache.get_stale(cache_key)
            if stale is not None:
                self.logger.warning(
                    "using_stale_price_cache",
                    day=cache_key,
                    error=str(e),
                )
                return stale
            raise

        await self.cache.set(cache_key, records)

        self.logger.info("price_curve_fetched", day=cache_key, hours=len(records))
        return records

    def _parse_price_response(self, data: dict, day: date) -> List[HourlyPriceRecord]:
        """Parse REE response to a normalized price curve"""
        errors = data.get("errors") or []
        if errors:
            details = ", ".join(str(e.get("detail", e)) for e in errors)
            raise PriceParseError(
                message=f"API returned errors: {details}",
                api_name=self.client_name,
            )

        included = data.get("included") or []
        if not included:
            raise PriceParseError(
                message="No price data found in API response",
                api_name=self.client_name,
            )

        series = self._find_price_series(included)
        if series is None:
            raise PriceParseError(
                message="No price series found in API response",
                api_name=self.client_name,
            )

        values = series.get("attributes", {}).get("values") or []
        if not values:
            raise PriceParseError(
                message="No price values found in series",
                api_name=self.client_name,
            )

        # The hour of a value is its position in the series
        parsed = []
        for hour, point in enumerate(values[:HOURS_PER_DAY]):
            raw_price = float(point.get("value", 0))
            parsed.append(
                HourlyPriceRecord(
                    hour=hour,
                    price_per_kwh=convert_mwh_to_kwh(raw_price),
                    timestamp=self._parse_timestamp(point.get("datetime")),
                    price_raw_per_mwh=raw_price,
                )
            )

        return self._normalize(parsed, day)

    @staticmethod
    def _find_price_series(included: List[dict]) -> Optional[dict]:
        """Pick the series holding prices"""
        for series in included:
            attributes = series.get("attributes") or {}
            magnitude = (attributes.get("magnitude") or "").lower()
            title = (attributes.get("title") or "").lower()

            if any(marker in magnitude for marker in PRICE_MAGNITUDE_MARKERS):
                return series
            if any(marker in title for marker in PRICE_TITLE_MARKERS):
                return series

        return None

    @staticmethod
    def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None

    @staticmethod
    def _normalize(
        records: List[HourlyPriceRecord],
        day: date,
    ) -> List[HourlyPriceRecord]:
        """
        Ensure exactly one record per hour.

        Missing hours take the first available price.
        """
        by_hour = {record.hour: record for record in records}
        first = records[0]
        midnight = datetime.combine(day, time())

        normalized = []
        for hour in range(HOURS_PER_DAY):
            record = by_hour.get(hour)
            if record is None:
                record = HourlyPriceRecord(
                    hour=hour,
                    price_per_kwh=first.price_per_kwh,
                    timestamp=midnight + timedelta(hours=hour),
                    price_raw_per_mwh=first.price_raw_per_mwh,
                )
            normalized.append(record)

        if len(records) < HOURS_PER_DAY:
            logger.warning(
                "price_curve_incomplete",
                day=day.isoformat(),
                hours_received=len(records),
            )

        return normalized
