"""
Storage Configuration and Connection Management

Handles the key-value store backing appliances and preferences:
- Redis when REDIS_URL is configured
- A process-local in-memory store otherwise
"""

from typing import Optional

import structlog

from tarifa.config.settings import settings
from tarifa.repositories.base import (
    InMemoryKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
)

logger = structlog.get_logger()


class StorageManager:
    """Manages the key-value store connection"""

    def __init__(self):
        self.store: Optional[KeyValueStore] = None

    async def initialize(self):
        """Initialize the store"""
        if not settings.redis_url:
            logger.info("redis_not_configured", fallback="in_memory")
            self.store = InMemoryKeyValueStore()
            return

        try:
            store = RedisKeyValueStore.from_url(settings.redis_url)
            await store.ping()
            self.store = store
            logger.info("redis_initialized")
        except Exception as e:
            logger.error("redis_init_failed", error=str(e))
            if settings.is_production:
                raise
            logger.info("continuing_without_redis", environment=settings.environment)
            self.store = InMemoryKeyValueStore()

    def get_store(self) -> KeyValueStore:
        """Get the active store, falling back to memory before initialization"""
        if self.store is None:
            self.store = InMemoryKeyValueStore()
        return self.store

    async def close(self):
        """Close the store connection"""
        if self.store is not None:
            await self.store.close()
            self.store = None


# Global storage manager instance
storage_manager = StorageManager()
