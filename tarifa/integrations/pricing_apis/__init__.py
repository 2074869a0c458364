"""
Electricity Pricing API Integration Layer

Provides the Spanish PVPC hourly price curve from the REE open data API.

Features:
- Async/await with httpx
- Automatic retry with exponential backoff
- In-memory TTL caching with stale fallback
- Structured logging
- Normalization to a 24-hour EUR/kWh curve
"""

from .base import (
    BasePricingClient,
    RetryConfig,
    APIError,
    RateLimitError,
    ServiceUnavailableError,
    PriceParseError,
)
from .cache import CacheConfig, CacheEntry, PriceCurveCache
from .ree import REEClient
from .service import (
    DailyPrices,
    PriceSummary,
    PricingService,
    create_pricing_service_from_settings,
)

__all__ = [
    # Base classes
    "BasePricingClient",
    "RetryConfig",
    # Errors
    "APIError",
    "RateLimitError",
    "ServiceUnavailableError",
    "PriceParseError",
    # Clients
    "REEClient",
    # Infrastructure
    "CacheConfig",
    "CacheEntry",
    "PriceCurveCache",
    # Service
    "DailyPrices",
    "PriceSummary",
    "PricingService",
    "create_pricing_service_from_settings",
]
