"""Collaborator interfaces used by the stream metadata service."""

from typing import List, Optional, Protocol, Tuple, runtime_checkable

from ..streams.models import StreamLocation, StreamSchema, StreamStats, StreamType

CacheKey = Tuple[str, str, str]


def cache_key(org_id: str, stream_type: StreamType, stream_name: str) -> CacheKey:
    """Key shared by the in-process caches: ``(org, type, name)``."""
    return (org_id, StreamType(stream_type).value, stream_name)


@runtime_checkable
class SchemaStore(Protocol):
    """Protocol for versioned schema storage.

    Implementations must make ``delete`` idempotent: deleting a stream that
    has no schema is a no-op.
    """

    async def get(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> StreamSchema:
        """Get the latest schema version.

        Returns:
            The latest StreamSchema, or an empty schema if the stream is unknown
        """
        ...

    async def get_versions(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> List[StreamSchema]:
        """Get every stored schema version, oldest first."""
        ...

    async def set(
        self,
        org_id: str,
        stream_name: str,
        stream_type: StreamType,
        schema: StreamSchema
    ) -> None:
        """Store ``schema`` as the latest version."""
        ...

    async def delete(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> None:
        """Delete all schema versions of a stream."""
        ...

    async def list(
        self,
        org_id: str,
        stream_type: Optional[StreamType] = None,
        with_schema: bool = False
    ) -> List[StreamLocation]:
        """List the streams of an organization.

        Args:
            org_id: Organization identifier
            stream_type: Restrict to one stream type (None for all)
            with_schema: Load the latest schema of each stream

        Returns:
            Stream locations in store order
        """
        ...


@runtime_checkable
class StatsCache(Protocol):
    """Protocol for the stream statistics cache."""

    async def get_stats(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> StreamStats:
        """Raw statistics for a stream; the default value when none are recorded."""
        ...

    async def remove_stats(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> None:
        """Drop cached statistics for a stream."""
        ...


@runtime_checkable
class CompactionCoordinator(Protocol):
    """Protocol for the compaction subsystem.

    ``mark_pending_delete`` and ``delete_offset`` must be idempotent.
    """

    async def mark_pending_delete(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> None:
        """Record the stream as pending deletion so compaction abandons it."""
        ...

    async def is_pending_delete(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> bool:
        """Check whether the stream is marked for deletion."""
        ...

    async def delete_offset(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> None:
        """Delete the compaction checkpoint of the stream."""
        ...


@runtime_checkable
class SchemaCache(Protocol):
    """Protocol for the in-process schema cache."""

    def get(self, key: CacheKey) -> Optional[StreamSchema]:
        ...

    def put(self, key: CacheKey, schema: StreamSchema) -> None:
        ...

    def remove(self, key: CacheKey) -> None:
        ...


@runtime_checkable
class StorageBackend(Protocol):
    """Deployment-level storage capability query."""

    def is_local_disk_backend(self) -> bool:
        """True for local-disk deployments, False for remote object storage."""
        ...


__all__ = [
    "CacheKey",
    "cache_key",
    "SchemaStore",
    "StatsCache",
    "CompactionCoordinator",
    "SchemaCache",
    "StorageBackend",
]
