"""
Optimization Data Models

Pydantic request/response models for schedule optimization.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from tarifa.models.appliance import ApplianceCreate
from tarifa.optimization.appliance_models import (
    BlockRounding,
    OptimizationResult,
    OptimizedSchedule,
    ReservationStrategy,
)
from tarifa.optimization.timeline import ApplianceRecommendation, TimelineSlot


class OptimizationRequest(BaseModel):
    """
    Request to optimize a set of appliances.

    When ``appliances`` is omitted the stored appliance list is used.
    Strategy fields override the configured defaults for this run only.
    """

    appliances: Optional[List[ApplianceCreate]] = None
    day: Optional[date] = None
    reservation_strategy: Optional[ReservationStrategy] = None
    block_rounding: Optional[BlockRounding] = None


class ScheduleResponse(BaseModel):
    """Response schema for one appliance's suggested run"""

    appliance_id: str
    appliance_name: Optional[str] = None
    start_time: str
    end_time: str
    duration_hours: float
    estimated_cost_eur: float
    average_price_per_kwh: float

    @classmethod
    def from_schedule(
        cls,
        schedule: OptimizedSchedule,
        appliance_name: Optional[str] = None,
    ) -> "ScheduleResponse":
        return cls(appliance_name=appliance_name, **schedule.to_dict())


class TimelineSlotResponse(BaseModel):
    """Response schema for one hour of the day timeline"""

    hour: int = Field(..., ge=0, le=23)
    appliance_ids: List[str]
    total_power_watts: float
    total_cost_eur: float

    @classmethod
    def from_slot(cls, slot: TimelineSlot) -> "TimelineSlotResponse":
        return cls(**slot.to_dict())


class OptimizationResponse(BaseModel):
    """Response schema for an optimization run"""

    day: date
    schedules: List[ScheduleResponse]
    unscheduled_appliance_ids: List[str] = Field(default_factory=list)
    baseline_cost_eur: float
    optimized_cost_eur: float
    total_savings_eur: float
    savings_percentage: float
    timeline: List[TimelineSlotResponse]

    @classmethod
    def from_result(
        cls,
        day: date,
        result: OptimizationResult,
        timeline: List[TimelineSlot],
        names: dict,
        unscheduled: List[str],
    ) -> "OptimizationResponse":
        return cls(
            day=day,
            schedules=[
                ScheduleResponse.from_schedule(s, names.get(s.appliance_id))
                for s in result.schedules
            ],
            unscheduled_appliance_ids=unscheduled,
            baseline_cost_eur=result.baseline_cost_eur,
            optimized_cost_eur=result.optimized_cost_eur,
            total_savings_eur=result.total_savings_eur,
            savings_percentage=result.savings_percentage,
            timeline=[TimelineSlotResponse.from_slot(slot) for slot in timeline],
        )


class RecommendationResponse(BaseModel):
    """Response schema for a single-appliance recommendation"""

    appliance_id: str
    best_time: str
    worst_time: str
    potential_savings_eur: float
    recommendation: str

    @classmethod
    def from_recommendation(
        cls,
        appliance_id: str,
        recommendation: ApplianceRecommendation,
    ) -> "RecommendationResponse":
        return cls(appliance_id=appliance_id, **recommendation.to_dict())
