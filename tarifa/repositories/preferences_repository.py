"""
Preferences Repository

Data access layer for user preferences and price alerts, stored as one JSON
document under ``<prefix>:preferences``.
"""

from typing import Optional

from pydantic import ValidationError as PydanticValidationError
import structlog

from tarifa.models.preferences import (
    PriceAlert,
    PriceAlertCreate,
    UserPreferences,
    UserPreferencesUpdate,
)
from tarifa.repositories.base import KeyValueStore, RepositoryError

logger = structlog.get_logger(__name__)


class PreferencesRepository:
    """Repository for the single preferences record"""

    def __init__(self, store: KeyValueStore, key_prefix: str = "tarifa"):
        self._store = store
        self._key = f"{key_prefix}:preferences"
        self._lock = store.lock(self._key)

    async def get(self) -> UserPreferences:
        """
        Load preferences.

        Returns:
            Stored preferences, or defaults when nothing is stored yet
        """
        raw = await self._store.get(self._key)
        if not raw:
            return UserPreferences()

        try:
            return UserPreferences.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.error("stored_preferences_unreadable", key=self._key, error=str(e))
            raise RepositoryError("Stored preferences are corrupted", e) from e

    async def save(self, preferences: UserPreferences) -> UserPreferences:
        await self._store.set(self._key, preferences.model_dump_json())
        return preferences

    async def update(self, data: UserPreferencesUpdate) -> UserPreferences:
        """
        Merge a partial update into the stored preferences.

        Args:
            data: Fields to change

        Returns:
            The updated preferences
        """
        async with self._lock:
            current = await self.get()
            changes = {
                name: getattr(data, name)
                for name in data.model_fields_set
                if getattr(data, name) is not None
            }
            updated = current.model_copy(update=changes)
            await self.save(updated)

        logger.info("preferences_updated", fields=sorted(changes))
        return updated

    async def add_alert(self, data: PriceAlertCreate) -> PriceAlert:
        """
        Add a price alert with a fresh ID and creation time.

        Returns:
            Created alert
        """
        alert = PriceAlert(**data.model_dump())

        async with self._lock:
            current = await self.get()
            await self.save(
                current.model_copy(update={"price_alerts": [*current.price_alerts, alert]})
            )

        logger.info("price_alert_added", alert_id=alert.id, kind=alert.kind.value)
        return alert

    async def remove_alert(self, alert_id: str) -> bool:
        """
        Remove a price alert.

        Returns:
            True if removed, False if not found
        """
        async with self._lock:
            current = await self.get()
            remaining = [a for a in current.price_alerts if a.id != alert_id]
            if len(remaining) == len(current.price_alerts):
                return False
            await self.save(current.model_copy(update={"price_alerts": remaining}))

        logger.info("price_alert_removed", alert_id=alert_id)
        return True

    async def get_alert(self, alert_id: str) -> Optional[PriceAlert]:
        for alert in (await self.get()).price_alerts:
            if alert.id == alert_id:
                return alert
        return None
