"""
Appliance API Endpoints

CRUD endpoints for the household appliance list, plus clear and import.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from tarifa.api.dependencies import get_appliance_repository
from tarifa.models.appliance import (
    ApplianceCreate,
    ApplianceImportRequest,
    ApplianceListResponse,
    ApplianceResponse,
    ApplianceUpdate,
)
from tarifa.repositories.appliance_repository import ApplianceRepository
from tarifa.repositories.base import NotFoundError

import structlog

logger = structlog.get_logger(__name__)

router = APIRouter()


def _not_found(appliance_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Appliance '{appliance_id}' not found",
    )


@router.get("", response_model=ApplianceListResponse, summary="List appliances")
async def list_appliances(
    repo: ApplianceRepository = Depends(get_appliance_repository),
):
    appliances = await repo.list_all()
    return ApplianceListResponse(
        appliances=[ApplianceResponse.from_domain(a) for a in appliances],
        total=len(appliances),
    )


@router.post(
    "",
    response_model=ApplianceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an appliance",
    responses={422: {"description": "Invalid appliance"}},
)
async def create_appliance(
    data: ApplianceCreate,
    repo: ApplianceRepository = Depends(get_appliance_repository),
):
    """
    Add an appliance; the server assigns its ID.
    """
    appliance = await repo.create(data)
    return ApplianceResponse.from_domain(appliance)


@router.put(
    "",
    response_model=ApplianceListResponse,
    summary="Replace the appliance list",
)
async def import_appliances(
    data: ApplianceImportRequest,
    repo: ApplianceRepository = Depends(get_appliance_repository),
):
    """
    Replace every stored appliance with the given list.
    """
    appliances = await repo.import_appliances(data.appliances)
    return ApplianceListResponse(
        appliances=[ApplianceResponse.from_domain(a) for a in appliances],
        total=len(appliances),
    )


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove every appliance",
)
async def clear_appliances(
    repo: ApplianceRepository = Depends(get_appliance_repository),
):
    await repo.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{appliance_id}",
    response_model=ApplianceResponse,
    summary="Get an appliance",
)
async def get_appliance(
    appliance_id: str,
    repo: ApplianceRepository = Depends(get_appliance_repository),
):
    appliance = await repo.get_by_id(appliance_id)
    if appliance is None:
        raise _not_found(appliance_id)
    return ApplianceResponse.from_domain(appliance)


@router.put(
    "/{appliance_id}",
    response_model=ApplianceResponse,
    summary="Update an appliance",
)
async def update_appliance(
    appliance_id: str,
    data: ApplianceUpdate,
    repo: ApplianceRepository = Depends(get_appliance_repository),
):
    """
    Change some fields of an appliance; omitted fields keep their value.
    """
    try:
        appliance = await repo.update(appliance_id, data)
    except NotFoundError:
        raise _not_found(appliance_id)
    return ApplianceResponse.from_domain(appliance)


@router.delete(
    "/{appliance_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove an appliance",
)
async def delete_appliance(
    appliance_id: str,
    repo: ApplianceRepository = Depends(get_appliance_repository),
):
    if not await repo.delete(appliance_id):
        raise _not_found(appliance_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
