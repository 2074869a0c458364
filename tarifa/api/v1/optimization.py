"""
Optimization API Endpoints

Schedules appliances into the cheapest hours of a day and advises on single
appliances.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tarifa.api.dependencies import get_planner_service
from tarifa.models.optimization import (
    OptimizationRequest,
    OptimizationResponse,
    RecommendationResponse,
)
from tarifa.repositories.base import NotFoundError
from tarifa.services.planner_service import PlannerService

router = APIRouter()


@router.post(
    "",
    response_model=OptimizationResponse,
    summary="Optimize appliance schedules",
    responses={
        200: {"description": "Schedules, costs, savings and day timeline"},
        422: {"description": "Invalid appliances or no price curve"},
        503: {"description": "Price feed unavailable and nothing cached"},
    },
)
async def optimize(
    request: Optional[OptimizationRequest] = None,
    planner: PlannerService = Depends(get_planner_service),
):
    """
    Optimize the stored appliances, or the inline list when one is sent.

    Inline appliances receive the IDs ``inline-1``, ``inline-2``, ... in
    request order.
    """
    return await planner.optimize(request or OptimizationRequest())


@router.get(
    "/recommendations/{appliance_id}",
    response_model=RecommendationResponse,
    summary="Best time to run one appliance",
)
async def get_recommendation(
    appliance_id: str,
    day: Optional[date] = Query(None, description="Day (YYYY-MM-DD), today when omitted"),
    planner: PlannerService = Depends(get_planner_service),
):
    """
    Compare running an appliance at the day's cheapest and most expensive
    hour, ignoring every other appliance.
    """
    try:
        return await planner.recommend(appliance_id, day)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Appliance '{appliance_id}' not found",
        )
