"""
Planner Service

Business logic tying the price feed, the stored appliances and the
schedule optimizer together.
"""

from datetime import date
from typing import List, Optional

import structlog

from tarifa.integrations.pricing_apis import PricingService
from tarifa.models.optimization import (
    OptimizationRequest,
    OptimizationResponse,
    RecommendationResponse,
)
from tarifa.models.preferences import PriceAlert, evaluate_price_alerts
from tarifa.optimization import Appliance, OptimizationConfig, OptimizationEngine
from tarifa.optimization.timeline import build_day_timeline, get_recommendation
from tarifa.repositories.appliance_repository import ApplianceRepository
from tarifa.repositories.base import NotFoundError
from tarifa.repositories.preferences_repository import PreferencesRepository

logger = structlog.get_logger(__name__)


class PlannerService:
    """
    Service layer for appliance planning.

    Optimizes against the curve of a single day; the optimizer itself never
    sees tomorrow's prices.
    """

    def __init__(
        self,
        pricing: PricingService,
        appliances: ApplianceRepository,
        preferences: Optional[PreferencesRepository] = None,
        config: Optional[OptimizationConfig] = None,
    ):
        """
        Initialize the planner service.

        Args:
            pricing: Price curve provider
            appliances: Stored appliance list
            preferences: Stored preferences (needed for alert checks)
            config: Default optimizer configuration
        """
        self._pricing = pricing
        self._appliances = appliances
        self._preferences = preferences
        self._config = config or OptimizationConfig()

    def _config_for(self, request: OptimizationRequest) -> OptimizationConfig:
        return OptimizationConfig(
            reservation_strategy=request.reservation_strategy or self._config.reservation_strategy,
            block_rounding=request.block_rounding or self._config.block_rounding,
        )

    async def _resolve_appliances(self, request: OptimizationRequest) -> List[Appliance]:
        if request.appliances is None:
            return await self._appliances.list_all()
        return [
            item.to_domain(f"inline-{index + 1}")
            for index, item in enumerate(request.appliances)
        ]

    async def optimize(self, request: OptimizationRequest) -> OptimizationResponse:
        """
        Schedule appliances into the cheapest hours of a day.

        Args:
            request: Appliances (stored list when omitted), day and strategy overrides

        Returns:
            Optimization result with the day timeline
        """
        day = request.day or self._pricing.now().date()
        appliances = await self._resolve_appliances(request)
        prices = await self._pricing.get_prices(day) if appliances else []

        engine = OptimizationEngine(self._config_for(request))
        result = engine.optimize(appliances, prices)
        timeline = build_day_timeline(result.schedules, appliances, prices)

        scheduled = {s.appliance_id for s in result.schedules}
        unscheduled = [a.id for a in appliances if a.id not in scheduled]

        logger.info(
            "planner_optimized",
            day=day.isoformat(),
            appliances=len(appliances),
            unscheduled=len(unscheduled),
        )

        return OptimizationResponse.from_result(
            day=day,
            result=result,
            timeline=timeline,
            names={a.id: a.name for a in appliances},
            unscheduled=unscheduled,
        )

    async def recommend(
        self,
        appliance_id: str,
        day: Optional[date] = None,
    ) -> RecommendationResponse:
        """
        Advise on the best time to run one stored appliance.

        Raises:
            NotFoundError: If the appliance does not exist
        """
        appliance = await self._appliances.get_by_id(appliance_id)
        if appliance is None:
            raise NotFoundError(f"Appliance {appliance_id} not found")

        prices = await self._pricing.get_prices(day)
        return RecommendationResponse.from_recommendation(
            appliance_id,
            get_recommendation(appliance, prices),
        )

    async def triggered_alerts(self) -> List[PriceAlert]:
        """Get the stored alerts crossed by the current price"""
        if self._preferences is None:
            return []

        summary = await self._pricing.get_price_summary()
        preferences = await self._preferences.get()
        triggered = evaluate_price_alerts(preferences.price_alerts, summary.stats.current)

        if triggered:
            logger.info(
                "price_alerts_triggered",
                current_price=summary.stats.current,
                alert_ids=[a.id for a in triggered],
            )
        return triggered
