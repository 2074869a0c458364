"""
User Preference Models

Pydantic models for display preferences, price alerts and the default
restrictions offered for new appliances.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from tarifa.models.appliance import TimeRestrictionSchema


class AlertKind(str, Enum):
    """Which side of the threshold triggers an alert"""
    BELOW = "below"
    ABOVE = "above"


class OptimizationStrategy(str, Enum):
    """Planning preference selected by the user"""
    COST = "cost"
    BALANCED = "balanced"
    CONVENIENCE = "convenience"


class PriceAlert(BaseModel):
    """
    Alert fired when the current price crosses a threshold.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    kind: AlertKind
    threshold: float = Field(..., ge=0, description="EUR/kWh")
    enabled: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def is_triggered(self, price: float) -> bool:
        if self.kind == AlertKind.BELOW:
            return price < self.threshold
        return price > self.threshold


class PriceAlertCreate(BaseModel):
    """Request model for a new price alert"""

    kind: AlertKind
    threshold: float = Field(..., ge=0)
    enabled: bool = True


class UserPreferences(BaseModel):
    """
    User preferences persisted alongside the appliance list.
    """

    model_config = ConfigDict(from_attributes=True)

    dark_mode: bool = False
    notifications_enabled: bool = True
    price_alerts: List[PriceAlert] = Field(default_factory=list)
    default_restrictions: List[TimeRestrictionSchema] = Field(default_factory=list)
    optimization_strategy: OptimizationStrategy = OptimizationStrategy.COST


class UserPreferencesUpdate(BaseModel):
    """Partial update; alerts are managed through their own endpoints"""

    dark_mode: Optional[bool] = None
    notifications_enabled: Optional[bool] = None
    default_restrictions: Optional[List[TimeRestrictionSchema]] = None
    optimization_strategy: Optional[OptimizationStrategy] = None


def evaluate_price_alerts(
    alerts: List[PriceAlert],
    current_price: float,
) -> List[PriceAlert]:
    """
    Get the enabled alerts whose threshold the current price crosses.

    Args:
        alerts: Configured alerts
        current_price: Current price in EUR/kWh

    Returns:
        Triggered alerts, in configuration order
    """
    return [
        alert for alert in alerts
        if alert.enabled and alert.is_triggered(current_price)
    ]
