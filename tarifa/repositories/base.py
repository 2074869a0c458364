"""
Base Repository

Provides the key-value store abstraction and common errors for all
repositories. Records are stored as JSON documents under namespaced keys.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional
import asyncio

from redis import asyncio as aioredis
from redis.exceptions import RedisError
import structlog

logger = structlog.get_logger(__name__)


class RepositoryError(Exception):
    """Base exception for repository errors"""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)


class NotFoundError(RepositoryError):
    """Raised when an entity is not found"""
    pass


class KeyValueStore(ABC):
    """
    Minimal async key-value store holding string values.

    Repositories rewrite whole documents, so each key has a write lock shared
    by every repository built over the same store.
    """

    def __init__(self):
        self._key_locks: Dict[str, asyncio.Lock] = {}

    def lock(self, key: str) -> asyncio.Lock:
        """Lock serializing read-modify-write cycles on ``key`` in this process"""
        if key not in self._key_locks:
            self._key_locks[key] = asyncio.Lock()
        return self._key_locks[key]

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: Full storage key

        Returns:
            The stored string, or None when the key is absent
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Write a value, replacing any previous one"""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if the key existed
        """
        pass

    async def close(self) -> None:
        """Release any underlying connection"""
        return None


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store used when Redis is not configured"""

    def __init__(self):
        super().__init__()
        self._data: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            self._data[key] = value

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._data.pop(key, None) is not None


class RedisKeyValueStore(KeyValueStore):
    """Store backed by a Redis connection (``redis.asyncio``)"""

    def __init__(self, client: aioredis.Redis):
        super().__init__()
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisKeyValueStore":
        """Create a store with a pooled connection to ``url``"""
        client = aioredis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=10,
            socket_keepalive=True,
            socket_connect_timeout=5,
            retry_on_timeout=True,
        )
        return cls(client)

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.client.get(key)
        except RedisError as e:
            logger.error("redis_get_failed", key=key, error=str(e))
            raise RepositoryError(f"Failed to read {key}", e) from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self.client.set(key, value)
        except RedisError as e:
            logger.error("redis_set_failed", key=key, error=str(e))
            raise RepositoryError(f"Failed to write {key}", e) from e

    async def delete(self, key: str) -> bool:
        try:
            return bool(await self.client.delete(key))
        except RedisError as e:
            logger.error("redis_delete_failed", key=key, error=str(e))
            raise RepositoryError(f"Failed to delete {key}", e) from e

    async def ping(self) -> bool:
        return bool(await self.client.ping())

    async def close(self) -> None:
        await self.client.aclose()
        logger.info("redis_connection_closed")
