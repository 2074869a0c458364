"""
API Endpoint Tests

Runs the FastAPI app against an in-memory store and a mocked price feed.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from tarifa.api.dependencies import get_pricing_service, get_store, verify_pin_code
from tarifa.config.settings import Settings, get_settings
from tarifa.integrations.pricing_apis import (
    BasePricingClient,
    PricingService,
    ServiceUnavailableError,
)
from tarifa.main import app
from tarifa.repositories.base import InMemoryKeyValueStore


API = "/api/v1"

WASHER = {"name": "Washing machine", "power_watts": 2000, "duration_hours": 2}


@pytest.fixture
def price_client(typical_prices):
    client = AsyncMock(spec=BasePricingClient)
    client.get_hourly_prices.return_value = typical_prices
    return client


@pytest.fixture
def client(price_client):
    """TestClient with a fresh store and the mocked price feed"""
    store = InMemoryKeyValueStore()
    pricing = PricingService(price_client)

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_pricing_service] = lambda: pricing

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# =============================================================================
# HEALTH
# =============================================================================


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["environment"] == "test"
        assert data["storage_status"] == "in_memory"

    def test_liveness(self, client):
        assert client.get("/health/live").json() == {"status": "alive"}

    def test_request_id_header(self, client):
        response = client.get("/health")
        assert "X-Request-ID" in response.headers

    def test_root(self, client):
        data = client.get("/").json()
        assert data["pin_required"] is False


# =============================================================================
# PRICES
# =============================================================================


class TestPricesAPI:

    def test_day_curve(self, client, price_client, sample_day):
        response = client.get(f"{API}/prices", params={"day": "2024-03-15"})

        assert response.status_code == 200
        data = response.json()
        assert data["day"] == "2024-03-15"
        assert len(data["prices"]) == 24
        assert data["prices"][4]["price_per_kwh"] == pytest.approx(0.085)
        price_client.get_hourly_prices.assert_awaited_once_with(sample_day)

    def test_today_and_tomorrow(self, client):
        data = client.get(f"{API}/prices/today-tomorrow").json()

        assert len(data["today"]) == 24
        assert all(p["is_tomorrow"] for p in data["tomorrow"])

    def test_summary(self, client):
        response = client.get(
            f"{API}/prices/summary", params={"day": "2024-03-15", "hour": 4}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["category"] == "cheap"
        assert data["category_label"] == "Cheap"
        assert data["stats"]["current"] == pytest.approx(0.085)
        assert [p["hour"] for p in data["best_hours"]] == [4, 3, 5]
        assert [p["hour"] for p in data["worst_hours"]] == [20, 19, 21]

    def test_summary_rejects_bad_hour(self, client):
        response = client.get(f"{API}/prices/summary", params={"hour": 24})
        assert response.status_code == 422

    def test_feed_unavailable(self, client, price_client):
        price_client.get_hourly_prices.side_effect = ServiceUnavailableError(api_name="ree")

        response = client.get(f"{API}/prices")

        assert response.status_code == 503
        assert response.json()["detail"] == "Electricity prices are currently unavailable"


# =============================================================================
# APPLIANCES
# =============================================================================


class TestAppliancesAPI:

    def test_crud_cycle(self, client):
        created = client.post(f"{API}/appliances", json=WASHER)
        assert created.status_code == 201
        appliance_id = created.json()["id"]

        listing = client.get(f"{API}/appliances").json()
        assert listing["total"] == 1

        updated = client.put(
            f"{API}/appliances/{appliance_id}", json={"priority": "high"}
        )
        assert updated.status_code == 200
        assert updated.json()["priority"] == "high"
        assert updated.json()["power_watts"] == 2000

        assert client.delete(f"{API}/appliances/{appliance_id}").status_code == 204
        assert client.get(f"{API}/appliances/{appliance_id}").status_code == 404

    def test_missing_appliance(self, client):
        for method in ("get", "delete"):
            response = getattr(client, method)(f"{API}/appliances/missing")
            assert response.status_code == 404
            assert response.json()["detail"] == "Appliance 'missing' not found"

        response = client.put(f"{API}/appliances/missing", json={"name": "Dryer"})
        assert response.status_code == 404

    def test_schema_validation(self, client):
        response = client.post(
            f"{API}/appliances", json={**WASHER, "power_watts": 20000}
        )
        assert response.status_code == 422

    def test_bad_restriction_time(self, client):
        response = client.post(
            f"{API}/appliances",
            json={**WASHER, "restrictions": [{"start": "25:00", "end": "08:00"}]},
        )
        assert response.status_code == 422

    def test_blank_name(self, client):
        response = client.post(f"{API}/appliances", json={**WASHER, "name": "   "})

        assert response.status_code == 422
        assert response.json()["errors"] == ["Name is required"]

    def test_import_and_clear(self, client):
        client.post(f"{API}/appliances", json=WASHER)

        imported = client.put(
            f"{API}/appliances",
            json={"appliances": [{**WASHER, "name": "Dryer"}, {**WASHER, "name": "Oven"}]},
        )
        assert imported.status_code == 200
        assert [a["name"] for a in imported.json()["appliances"]] == ["Dryer", "Oven"]

        assert client.delete(f"{API}/appliances").status_code == 204
        assert client.get(f"{API}/appliances").json()["total"] == 0


# =============================================================================
# OPTIMIZATION
# =============================================================================


class TestOptimizationAPI:

    def test_stored_appliances(self, client):
        appliance_id = client.post(f"{API}/appliances", json=WASHER).json()["id"]

        response = client.post(f"{API}/optimization", json={"day": "2024-03-15"})

        assert response.status_code == 200
        data = response.json()
        schedule = data["schedules"][0]
        assert schedule["appliance_id"] == appliance_id
        assert schedule["appliance_name"] == "Washing machine"
        assert schedule["start_time"] == "03:00"
        assert schedule["end_time"] == "05:00"
        assert schedule["estimated_cost_eur"] == pytest.approx(2.0 * (0.090 + 0.085))
        assert data["total_savings_eur"] > 0
        assert data["unscheduled_appliance_ids"] == []
        assert len(data["timeline"]) == 24

    def test_no_body(self, client):
        response = client.post(f"{API}/optimization")

        assert response.status_code == 200
        data = response.json()
        assert data["schedules"] == []
        assert data["savings_percentage"] == 0.0

    def test_inline_appliances(self, client):
        response = client.post(
            f"{API}/optimization",
            json={
                "day": "2024-03-15",
                "appliances": [
                    {**WASHER, "priority": "low"},
                    {"name": "Dishwasher", "power_watts": 1500, "duration_hours": 1, "priority": "high"},
                ],
            },
        )

        schedules = {s["appliance_id"]: s for s in response.json()["schedules"]}
        assert set(schedules) == {"inline-1", "inline-2"}
        assert schedules["inline-2"]["start_time"] == "04:00"

    def test_strategy_override(self, client):
        response = client.post(
            f"{API}/optimization",
            json={
                "day": "2024-03-15",
                "block_rounding": "truncate",
                "appliances": [{**WASHER, "duration_hours": 1.5}],
            },
        )

        schedule = response.json()["schedules"][0]
        assert schedule["start_time"] == "04:00"
        assert schedule["end_time"] == "05:30"

    def test_no_price_curve(self, client, price_client):
        client.post(f"{API}/appliances", json=WASHER)
        price_client.get_hourly_prices.return_value = []

        response = client.post(f"{API}/optimization")
        assert response.status_code == 422

    def test_recommendation(self, client):
        appliance_id = client.post(
            f"{API}/appliances",
            json={"name": "Dishwasher", "power_watts": 1500, "duration_hours": 2},
        ).json()["id"]

        response = client.get(f"{API}/optimization/recommendations/{appliance_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["best_time"] == "04:00"
        assert data["worst_time"] == "20:00"
        assert data["potential_savings_eur"] == pytest.approx(0.465)

    def test_recommendation_missing(self, client):
        response = client.get(f"{API}/optimization/recommendations/missing")
        assert response.status_code == 404


# =============================================================================
# PREFERENCES
# =============================================================================


class TestPreferencesAPI:

    def test_defaults_and_update(self, client):
        assert client.get(f"{API}/preferences").json()["dark_mode"] is False

        response = client.put(
            f"{API}/preferences",
            json={"dark_mode": True, "optimization_strategy": "balanced"},
        )
        assert response.status_code == 200

        data = client.get(f"{API}/preferences").json()
        assert data["dark_mode"] is True
        assert data["optimization_strategy"] == "balanced"
        assert data["notifications_enabled"] is True

    def test_alerts(self, client):
        created = client.post(
            f"{API}/preferences/alerts", json={"kind": "below", "threshold": 0.1}
        )
        assert created.status_code == 201
        alert_id = created.json()["id"]

        assert client.delete(f"{API}/preferences/alerts/{alert_id}").status_code == 204
        assert client.delete(f"{API}/preferences/alerts/{alert_id}").status_code == 404

    def test_triggered_alerts(self, client, price_client, flat_prices):
        price_client.get_hourly_prices.return_value = flat_prices
        client.post(f"{API}/preferences/alerts", json={"kind": "above", "threshold": 0.1})
        client.post(f"{API}/preferences/alerts", json={"kind": "below", "threshold": 0.1})

        triggered = client.get(f"{API}/preferences/alerts/triggered").json()

        assert [a["kind"] for a in triggered] == ["above"]


# =============================================================================
# PIN GATING
# =============================================================================


class TestPinCode:

    @pytest.fixture
    def pin_client(self, client):
        app.dependency_overrides[get_settings] = lambda: Settings(
            ENVIRONMENT="test", PIN_CODE="1234"
        )
        return client

    def test_missing_pin(self, pin_client):
        response = pin_client.get(f"{API}/appliances")

        assert response.status_code == 401
        assert response.json()["detail"] == "PIN code required"

    def test_wrong_pin(self, pin_client):
        response = pin_client.get(f"{API}/appliances", headers={"X-PIN-Code": "0000"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid PIN code"

    def test_correct_pin(self, pin_client):
        response = pin_client.get(f"{API}/appliances", headers={"X-PIN-Code": "1234"})
        assert response.status_code == 200

    def test_health_is_open(self, pin_client):
        assert pin_client.get("/health").status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pin_code", ["ñ", "12€4", "1234\u00e9"])
    async def test_non_ascii_pin_rejected(self, pin_code):
        settings = Settings(ENVIRONMENT="test", PIN_CODE="1234")

        with pytest.raises(HTTPException) as exc_info:
            await verify_pin_code(pin_code=pin_code, settings=settings)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid PIN code"

    @pytest.mark.asyncio
    async def test_non_ascii_configured_pin(self):
        settings = Settings(ENVIRONMENT="test", PIN_CODE="clé")

        assert await verify_pin_code(pin_code="clé", settings=settings) is True
