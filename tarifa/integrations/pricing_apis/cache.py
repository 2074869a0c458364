"""
In-Memory Caching Layer for Price Curves

One entry per market day. Expired entries stay in memory until
``cleanup_expired`` runs, so a failed refresh can still serve them.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import asyncio

import structlog

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CacheConfig:
    """Price cache settings"""

    # A day's curve is published once, so it can live for half a day
    price_curve_ttl: int = 12 * 60 * 60
    key_prefix: str = "prices"


@dataclass
class CacheEntry:
    """A cached curve and the moment it stops being fresh"""

    key: str
    value: Any
    ttl_seconds: int
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def expires_at(self) -> datetime:
        return self.created_at + timedelta(seconds=self.ttl_seconds)

    @property
    def is_expired(self) -> bool:
        return _utcnow() >= self.expires_at

    @property
    def ttl_remaining(self) -> float:
        return max(0.0, (self.expires_at - _utcnow()).total_seconds())


class PriceCurveCache:
    """
    TTL cache for daily price curves.

    ``get`` only returns fresh entries; ``get_stale`` returns whatever is
    stored, expired or not.
    """

    def __init__(self, config: Optional[CacheConfig] = None):
        self.config = config or CacheConfig()
        self.logger = logger.bind(component="price_curve_cache")

        self._entries: Dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()
        self._counters = {"hits": 0, "misses": 0, "stale_hits": 0}

    def _full_key(self, key: str) -> str:
        return f"{self.config.key_prefix}:{key}"

    async def _entry(self, key: str) -> Optional[CacheEntry]:
        async with self._lock:
            return self._entries.get(self._full_key(key))

    async def get(self, key: str) -> Optional[Any]:
        """Fresh value for a key, or None"""
        entry = await self._entry(key)
        if entry is None or entry.is_expired:
            self._counters["misses"] += 1
            self.logger.debug("cache_miss", key=key)
            return None

        self._counters["hits"] += 1
        self.logger.debug("cache_hit", key=key, ttl_remaining=entry.ttl_remaining)
        return entry.value

    async def get_stale(self, key: str) -> Optional[Any]:
        """Stored value for a key even past its TTL, or None"""
        entry = await self._entry(key)
        if entry is None:
            return None
        if entry.is_expired:
            self._counters["stale_hits"] += 1
        return entry.value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store a value; ``ttl`` overrides the configured TTL"""
        ttl_seconds = self.config.price_curve_ttl if ttl is None else ttl
        entry = CacheEntry(key=key, value=value, ttl_seconds=ttl_seconds)

        async with self._lock:
            self._entries[self._full_key(key)] = entry

        self.logger.debug("cache_set", key=key, ttl=ttl_seconds)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(self._full_key(key), None) is not None

    async def cleanup_expired(self) -> int:
        """Drop expired entries and return how many were removed"""
        async with self._lock:
            expired = [k for k, entry in self._entries.items() if entry.is_expired]
            for full_key in expired:
                del self._entries[full_key]

        if expired:
            self.logger.info("cache_cleanup", expired_count=len(expired))
        return len(expired)

    def get_metrics(self) -> dict:
        lookups = self._counters["hits"] + self._counters["misses"]
        hit_rate = round(self._counters["hits"] / lookups * 100, 2) if lookups else 0.0
        return {
            **self._counters,
            "hit_rate_percent": hit_rate,
            "entries": len(self._entries),
        }
