"""In-memory collaborators.

Every mutation here is idempotent: deleting what is already gone and marking
what is already marked are no-ops. Failures can be injected per operation to
exercise the delete workflow.
"""

from typing import Dict, List, Optional, Set

import structlog

from ..streams.models import StreamLocation, StreamSchema, StreamStats, StreamType
from .base import CacheKey, cache_key

logger = structlog.get_logger(__name__)


class _FailureInjection:
    """Raise a configured exception when an operation is invoked."""

    def __init__(self):
        self.failures: Dict[str, BaseException] = {}
        self.calls: List[str] = []

    def fail(self, operation: str, error: BaseException) -> None:
        self.failures[operation] = error

    def clear_failures(self) -> None:
        self.failures.clear()

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        error = self.failures.get(operation)
        if error is not None:
            raise error


class InMemorySchemaStore(_FailureInjection):
    """Versioned schema store kept in a dict, in insertion order."""

    def __init__(self):
        super().__init__()
        self._versions: Dict[CacheKey, List[StreamSchema]] = {}

    async def get(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> StreamSchema:
        self._enter("get")
        versions = self._versions.get(cache_key(org_id, stream_type, stream_name))
        return versions[-1] if versions else StreamSchema()

    async def get_versions(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> List[StreamSchema]:
        self._enter("get_versions")
        return list(self._versions.get(cache_key(org_id, stream_type, stream_name), []))

    async def set(
        self,
        org_id: str,
        stream_name: str,
        stream_type: StreamType,
        schema: StreamSchema
    ) -> None:
        self._enter("set")
        key = cache_key(org_id, stream_type, stream_name)
        self._versions.setdefault(key, []).append(schema)

    async def delete(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> None:
        self._enter("delete")
        self._versions.pop(cache_key(org_id, stream_type, stream_name), None)

    async def list(
        self,
        org_id: str,
        stream_type: Optional[StreamType] = None,
        with_schema: bool = False
    ) -> List[StreamLocation]:
        self._enter("list")
        wanted = StreamType(stream_type).value if stream_type is not None else None
        locations = []
        for (org, type_, name), versions in self._versions.items():
            if org != org_id or (wanted is not None and type_ != wanted):
                continue
            schema = versions[-1] if with_schema and versions else StreamSchema()
            locations.append(
                StreamLocation(stream_name=name, stream_type=StreamType(type_), schema=schema)
            )
        return locations


class InMemoryStatsCache(_FailureInjection):
    """Stream statistics keyed by ``(org, type, name)``."""

    def __init__(self):
        super().__init__()
        self._stats: Dict[CacheKey, StreamStats] = {}

    def set_stats(
        self,
        org_id: str,
        stream_name: str,
        stream_type: StreamType,
        stats: StreamStats
    ) -> None:
        self._stats[cache_key(org_id, stream_type, stream_name)] = stats

    def contains(self, org_id: str, stream_name: str, stream_type: StreamType) -> bool:
        return cache_key(org_id, stream_type, stream_name) in self._stats

    async def get_stats(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> StreamStats:
        self._enter("get_stats")
        stats = self._stats.get(cache_key(org_id, stream_type, stream_name))
        return stats.model_copy() if stats is not None else StreamStats()

    async def remove_stats(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> None:
        self._enter("remove_stats")
        self._stats.pop(cache_key(org_id, stream_type, stream_name), None)


class InMemoryCompactionCoordinator(_FailureInjection):
    """Pending-delete marks and compaction offsets."""

    def __init__(self):
        super().__init__()
        self.pending_deletes: Set[CacheKey] = set()
        self.offsets: Dict[CacheKey, int] = {}

    def set_offset(
        self, org_id: str, stream_name: str, stream_type: StreamType, offset: int
    ) -> None:
        self.offsets[cache_key(org_id, stream_type, stream_name)] = offset

    async def mark_pending_delete(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> None:
        self._enter("mark_pending_delete")
        self.pending_deletes.add(cache_key(org_id, stream_type, stream_name))

    async def is_pending_delete(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> bool:
        self._enter("is_pending_delete")
        return cache_key(org_id, stream_type, stream_name) in self.pending_deletes

    async def delete_offset(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> None:
        self._enter("delete_offset")
        self.offsets.pop(cache_key(org_id, stream_type, stream_name), None)


class InMemorySchemaCache(_FailureInjection):
    """The process-local schema cache."""

    def __init__(self):
        super().__init__()
        self._schemas: Dict[CacheKey, StreamSchema] = {}

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def get(self, key: CacheKey) -> Optional[StreamSchema]:
        self._enter("get")
        return self._schemas.get(key)

    def put(self, key: CacheKey, schema: StreamSchema) -> None:
        self._enter("put")
        self._schemas[key] = schema

    def remove(self, key: CacheKey) -> None:
        self._enter("remove")
        if self._schemas.pop(key, None) is not None:
            logger.debug("Removed cached schema", key="/".join(key))


__all__ = [
    "InMemorySchemaStore",
    "InMemoryStatsCache",
    "InMemoryCompactionCoordinator",
    "InMemorySchemaCache",
]
