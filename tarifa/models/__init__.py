"""
Data Models

Pydantic request/response models for the Tarifa API.
"""

from tarifa.models.appliance import (
    TimeRestrictionSchema,
    ApplianceCreate,
    ApplianceUpdate,
    ApplianceResponse,
    ApplianceListResponse,
    ApplianceImportRequest,
)

from tarifa.models.preferences import (
    AlertKind,
    OptimizationStrategy,
    PriceAlert,
    PriceAlertCreate,
    UserPreferences,
    UserPreferencesUpdate,
    evaluate_price_alerts,
)

from tarifa.models.price import (
    HourlyPriceResponse,
    PriceStatsResponse,
    PriceCurveResponse,
    DailyPricesResponse,
    PriceSummaryResponse,
)

from tarifa.models.optimization import (
    OptimizationRequest,
    ScheduleResponse,
    TimelineSlotResponse,
    OptimizationResponse,
    RecommendationResponse,
)

__all__ = [
    # Appliance models
    "TimeRestrictionSchema",
    "ApplianceCreate",
    "ApplianceUpdate",
    "ApplianceResponse",
    "ApplianceListResponse",
    "ApplianceImportRequest",
    # Preferences models
    "AlertKind",
    "OptimizationStrategy",
    "PriceAlert",
    "PriceAlertCreate",
    "UserPreferences",
    "UserPreferencesUpdate",
    "evaluate_price_alerts",
    # Price models
    "HourlyPriceResponse",
    "PriceStatsResponse",
    "PriceCurveResponse",
    "DailyPricesResponse",
    "PriceSummaryResponse",
    # Optimization models
    "OptimizationRequest",
    "ScheduleResponse",
    "TimelineSlotResponse",
    "OptimizationResponse",
    "RecommendationResponse",
]
