"""
Repository Pattern Implementations

Data access layer for the Tarifa API.
"""

from tarifa.repositories.base import (
    KeyValueStore,
    InMemoryKeyValueStore,
    RedisKeyValueStore,
    RepositoryError,
    NotFoundError,
)

from tarifa.repositories.appliance_repository import ApplianceRepository
from tarifa.repositories.preferences_repository import PreferencesRepository

__all__ = [
    # Base classes and exceptions
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "RepositoryError",
    "NotFoundError",
    # Repository implementations
    "ApplianceRepository",
    "PreferencesRepository",
]
