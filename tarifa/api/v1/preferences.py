"""
Preferences API Endpoints

User preferences and price alerts.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from tarifa.api.dependencies import get_planner_service, get_preferences_repository
from tarifa.models.preferences import (
    PriceAlert,
    PriceAlertCreate,
    UserPreferences,
    UserPreferencesUpdate,
)
from tarifa.repositories.preferences_repository import PreferencesRepository
from tarifa.services.planner_service import PlannerService

router = APIRouter()


@router.get("", response_model=UserPreferences, summary="Get preferences")
async def get_preferences(
    repo: PreferencesRepository = Depends(get_preferences_repository),
):
    return await repo.get()


@router.put("", response_model=UserPreferences, summary="Update preferences")
async def update_preferences(
    data: UserPreferencesUpdate,
    repo: PreferencesRepository = Depends(get_preferences_repository),
):
    """
    Merge the given fields into the stored preferences.
    """
    return await repo.update(data)


@router.post(
    "/alerts",
    response_model=PriceAlert,
    status_code=status.HTTP_201_CREATED,
    summary="Add a price alert",
)
async def add_alert(
    data: PriceAlertCreate,
    repo: PreferencesRepository = Depends(get_preferences_repository),
):
    return await repo.add_alert(data)


@router.get(
    "/alerts/triggered",
    response_model=List[PriceAlert],
    summary="Alerts crossed by the current price",
)
async def get_triggered_alerts(
    planner: PlannerService = Depends(get_planner_service),
):
    return await planner.triggered_alerts()


@router.delete(
    "/alerts/{alert_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a price alert",
)
async def remove_alert(
    alert_id: str,
    repo: PreferencesRepository = Depends(get_preferences_repository),
):
    if not await repo.remove_alert(alert_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Alert '{alert_id}' not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
