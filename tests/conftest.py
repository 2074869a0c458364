"""
Pytest Configuration and Shared Fixtures

This module provides common fixtures and configuration for all tests.
"""

import os

# Settings are read at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.pop("PIN_CODE", None)
os.environ.pop("REDIS_URL", None)

from datetime import date, datetime, timedelta
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from tarifa.optimization.appliance_models import (
    Appliance,
    HourlyPriceRecord,
    Priority,
    TimeRestriction,
    build_price_curve,
)


# =============================================================================
# PRICE CURVE FIXTURES
# =============================================================================


# A typical PVPC day (EUR/kWh): cheap at night and mid-afternoon,
# expensive in the evening peak. Cheapest hour is 04:00, dearest 20:00.
TYPICAL_DAY_PRICES = [
    0.110, 0.100, 0.095, 0.090, 0.085, 0.092,
    0.120, 0.150, 0.170, 0.160, 0.140, 0.130,
    0.125, 0.118, 0.115, 0.122, 0.145, 0.180,
    0.210, 0.230, 0.240, 0.220, 0.190, 0.150,
]


@pytest.fixture
def sample_day() -> date:
    return date(2024, 3, 15)


@pytest.fixture
def typical_prices(sample_day) -> List[HourlyPriceRecord]:
    """24-hour curve with a clear night valley and evening peak"""
    return build_price_curve(TYPICAL_DAY_PRICES, day=sample_day)


@pytest.fixture
def flat_prices() -> List[HourlyPriceRecord]:
    """Flat curve at 0.15 EUR/kWh"""
    return build_price_curve([0.15] * 24)


@pytest.fixture
def make_appliance():
    """Factory fixture for appliances"""
    def _make(
        id: str = "dishwasher",
        name: str = "Dishwasher",
        power_watts: float = 1500,
        duration_hours: float = 1,
        priority: Priority = Priority.MEDIUM,
        restrictions: Optional[list] = None,
    ) -> Appliance:
        return Appliance(
            id=id,
            name=name,
            power_watts=power_watts,
            duration_hours=duration_hours,
            priority=priority,
            restrictions=tuple(restrictions or ()),
        )

    return _make


@pytest.fixture
def night_forbidden() -> TimeRestriction:
    """Forbid 22:00-08:00 (wraps past midnight)"""
    return TimeRestriction(start="22:00", end="08:00")


# =============================================================================
# REE API FIXTURES
# =============================================================================


@pytest.fixture
def ree_payload():
    """Factory fixture for REE market price responses"""
    def _create_payload(
        day: date,
        prices_mwh: Optional[List[float]] = None,
        magnitude: str = "price",
        title: str = "PVPC",
    ) -> dict:
        if prices_mwh is None:
            prices_mwh = [p * 1000 for p in TYPICAL_DAY_PRICES]
        midnight = datetime(day.year, day.month, day.day)
        values = [
            {
                "value": value,
                "percentage": 1,
                "datetime": (midnight + timedelta(hours=i)).isoformat() + "+01:00",
            }
            for i, value in enumerate(prices_mwh)
        ]
        return {
            "data": {
                "type": "Precios mercado peninsular en tiempo real",
                "id": "mer13",
                "attributes": {"title": "Precios mercado", "lastUpdate": "2024-03-14T20:00:00"},
            },
            "included": [
                {
                    "type": "PVPC (€/MWh)",
                    "id": "1001",
                    "attributes": {
                        "title": title,
                        "magnitude": magnitude,
                        "lastUpdate": "2024-03-14T20:00:00",
                        "values": values,
                    },
                }
            ],
        }

    return _create_payload


# =============================================================================
# MOCK HTTP CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def mock_httpx_response():
    """Factory fixture for creating mock HTTP responses"""
    def _create_response(
        status_code: int = 200,
        json_data: Optional[dict] = None,
        text: str = "",
        headers: Optional[dict] = None,
    ):
        response = MagicMock(spec=httpx.Response)
        response.status_code = status_code
        response.text = text
        response.headers = headers or {}
        response.json.return_value = json_data if json_data is not None else {}
        return response

    return _create_response


@pytest.fixture
def mock_httpx_client():
    """Create a mock httpx AsyncClient"""
    client = AsyncMock(spec=httpx.AsyncClient)
    client.is_closed = False
    return client
