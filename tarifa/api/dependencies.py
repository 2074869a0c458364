"""
API Dependencies

FastAPI dependency injection for storage, services, and PIN gating.
"""

from typing import Optional
import hmac

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from tarifa.config.settings import Settings, get_settings
from tarifa.config.storage import storage_manager
from tarifa.integrations.pricing_apis import (
    PricingService,
    create_pricing_service_from_settings,
)
from tarifa.repositories.appliance_repository import ApplianceRepository
from tarifa.repositories.base import KeyValueStore
from tarifa.repositories.preferences_repository import PreferencesRepository
from tarifa.services.planner_service import PlannerService

# PIN header for single-household access gating
pin_code_header = APIKeyHeader(name="X-PIN-Code", auto_error=False)

# Shared across requests so the price cache survives between them
_pricing_service: Optional[PricingService] = None


# =============================================================================
# Storage Dependencies
# =============================================================================


def get_store() -> KeyValueStore:
    """Get the active key-value store"""
    return storage_manager.get_store()


def get_appliance_repository(
    store: KeyValueStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ApplianceRepository:
    return ApplianceRepository(store, key_prefix=settings.storage_key_prefix)


def get_preferences_repository(
    store: KeyValueStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> PreferencesRepository:
    return PreferencesRepository(store, key_prefix=settings.storage_key_prefix)


# =============================================================================
# Service Dependencies
# =============================================================================


def get_pricing_service() -> PricingService:
    """Get the process-wide pricing service"""
    global _pricing_service
    if _pricing_service is None:
        _pricing_service = create_pricing_service_from_settings()
    return _pricing_service


async def close_pricing_service() -> None:
    global _pricing_service
    if _pricing_service is not None:
        await _pricing_service.close()
        _pricing_service = None


def get_planner_service(
    pricing: PricingService = Depends(get_pricing_service),
    appliances: ApplianceRepository = Depends(get_appliance_repository),
    preferences: PreferencesRepository = Depends(get_preferences_repository),
    settings: Settings = Depends(get_settings),
) -> PlannerService:
    return PlannerService(
        pricing=pricing,
        appliances=appliances,
        preferences=preferences,
        config=settings.optimization_config,
    )


# =============================================================================
# Access Dependencies
# =============================================================================


async def verify_pin_code(
    pin_code: Optional[str] = Depends(pin_code_header),
    settings: Settings = Depends(get_settings),
) -> bool:
    """
    Verify the PIN code when one is configured.

    Args:
        pin_code: PIN from X-PIN-Code header

    Returns:
        True if access is allowed

    Raises:
        HTTPException: If the PIN is missing or wrong
    """
    if settings.pin_code is None:
        return True

    if not pin_code:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="PIN code required",
        )

    # Constant-time comparison
    if not hmac.compare_digest(pin_code.encode("utf-8"), settings.pin_code.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid PIN code",
        )

    return True
