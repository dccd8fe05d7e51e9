"""Collaborator interfaces and in-process implementations."""

from .base import (
    CacheKey,
    CompactionCoordinator,
    SchemaCache,
    SchemaStore,
    StatsCache,
    StorageBackend,
    cache_key,
)
from .memory import (
    InMemoryCompactionCoordinator,
    InMemorySchemaCache,
    InMemorySchemaStore,
    InMemoryStatsCache,
)
from .storage_backend import ConfiguredStorageBackend, StaticStorageBackend

__all__ = [
    "CacheKey",
    "cache_key",
    "SchemaStore",
    "StatsCache",
    "CompactionCoordinator",
    "SchemaCache",
    "StorageBackend",
    "InMemorySchemaStore",
    "InMemoryStatsCache",
    "InMemoryCompactionCoordinator",
    "InMemorySchemaCache",
    "ConfiguredStorageBackend",
    "StaticStorageBackend",
]
