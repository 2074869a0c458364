"""
Appliance Repository

Data access layer for the user's appliance list.
The whole list is stored as one JSON document under ``<prefix>:appliances``.
"""

from dataclasses import replace
from typing import List, Optional
from uuid import uuid4
import json

import structlog

from tarifa.models.appliance import ApplianceCreate, ApplianceUpdate
from tarifa.optimization.appliance_models import Appliance
from tarifa.optimization.validation import validate_appliance_or_raise
from tarifa.repositories.base import KeyValueStore, NotFoundError, RepositoryError

logger = structlog.get_logger(__name__)


class ApplianceRepository:
    """
    Repository for managing appliances.

    Read-modify-write cycles are serialized by the store's lock for the key.
    """

    def __init__(self, store: KeyValueStore, key_prefix: str = "tarifa"):
        """
        Initialize the appliance repository.

        Args:
            store: Key-value store holding the JSON document
            key_prefix: Namespace for storage keys
        """
        self._store = store
        self._key = f"{key_prefix}:appliances"
        self._lock = store.lock(self._key)

    async def _load(self) -> List[Appliance]:
        raw = await self._store.get(self._key)
        if not raw:
            return []

        try:
            return [Appliance.from_dict(item) for item in json.loads(raw)]
        except (ValueError, KeyError, TypeError) as e:
            logger.error("stored_appliances_unreadable", key=self._key, error=str(e))
            raise RepositoryError("Stored appliance list is corrupted", e) from e

    async def _save(self, appliances: List[Appliance]) -> None:
        await self._store.set(
            self._key,
            json.dumps([appliance.to_dict() for appliance in appliances]),
        )

    async def list_all(self) -> List[Appliance]:
        """
        Get every stored appliance, in insertion order.

        Returns:
            List of appliances
        """
        return await self._load()

    async def get_by_id(self, id: str) -> Optional[Appliance]:
        """
        Get an appliance by ID.

        Args:
            id: Appliance ID

        Returns:
            Appliance if found, None otherwise
        """
        for appliance in await self._load():
            if appliance.id == id:
                return appliance
        return None

    async def create(self, data: ApplianceCreate) -> Appliance:
        """
        Create a new appliance with a fresh ID.

        Args:
            data: Appliance fields

        Returns:
            Created appliance
        """
        appliance = validate_appliance_or_raise(data.to_domain(str(uuid4())))

        async with self._lock:
            appliances = await self._load()
            appliances.append(appliance)
            await self._save(appliances)

        logger.info("appliance_created", appliance_id=appliance.id, name=appliance.name)
        return appliance

    async def update(self, id: str, data: ApplianceUpdate) -> Appliance:
        """
        Apply a partial update to an appliance.

        Args:
            id: Appliance ID
            data: Fields to change

        Returns:
            Updated appliance

        Raises:
            NotFoundError: If no appliance has this ID
        """
        changes = {
            name: value
            for name, value in data.model_dump(exclude_unset=True, exclude={"restrictions"}).items()
            if value is not None
        }
        if "name" in changes:
            changes["name"] = changes["name"].strip()
        if data.restrictions is not None:
            changes["restrictions"] = tuple(r.to_domain() for r in data.restrictions)

        async with self._lock:
            appliances = await self._load()
            for index, appliance in enumerate(appliances):
                if appliance.id == id:
                    updated = validate_appliance_or_raise(replace(appliance, **changes))
                    appliances[index] = updated
                    await self._save(appliances)
                    break
            else:
                raise NotFoundError(f"Appliance {id} not found")

        logger.info("appliance_updated", appliance_id=id, fields=sorted(changes))
        return updated

    async def delete(self, id: str) -> bool:
        """
        Delete an appliance by ID.

        Returns:
            True if deleted, False if not found
        """
        async with self._lock:
            appliances = await self._load()
            remaining = [a for a in appliances if a.id != id]
            if len(remaining) == len(appliances):
                return False
            await self._save(remaining)

        logger.info("appliance_deleted", appliance_id=id)
        return True

    async def clear(self) -> None:
        """Remove every appliance"""
        async with self._lock:
            await self._store.delete(self._key)

        logger.info("appliances_cleared")

    async def import_appliances(self, items: List[ApplianceCreate]) -> List[Appliance]:
        """
        Replace the whole list.

        Args:
            items: New appliance list; each entry receives a fresh ID

        Returns:
            The stored appliances
        """
        appliances = [
            validate_appliance_or_raise(item.to_domain(str(uuid4())))
            for item in items
        ]

        async with self._lock:
            await self._save(appliances)

        logger.info("appliances_imported", count=len(appliances))
        return appliances

    async def count(self) -> int:
        return len(await self._load())
