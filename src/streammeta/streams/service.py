"""Stream metadata service.

Coordinates the read path for stream descriptors, settings updates, and the
stream delete workflow across the schema store, the in-process caches and the
compaction subsystem.

The delete workflow runs its stages in a fixed order and stops at the first
failure. Completed stages are never rolled back: each underlying operation is
idempotent, so re-running the whole delete is always safe.
"""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Tuple

import structlog

from ..connectors.base import (
    CompactionCoordinator,
    SchemaCache,
    SchemaStore,
    StatsCache,
    StorageBackend,
    cache_key,
)
from ..monitoring.metrics import MetricsCollector
from .descriptor import StreamDescriptorBuilder
from .errors import (
    DeleteStage,
    StreamConflictError,
    StreamNotFoundError,
    SubsystemFailure,
)
from .models import StreamDescriptor, StreamSettings, StreamStats, StreamType
from .settings_codec import SettingsCodec
from .stats import normalize_stats

logger = structlog.get_logger(__name__)


@dataclass
class DeleteResult:
    """Outcome of a completed delete workflow."""

    org_id: str
    stream_name: str
    stream_type: StreamType
    stage: DeleteStage = DeleteStage.START
    completed: List[DeleteStage] = field(default_factory=list)


class StreamMetadataService:
    """Read, update and delete stream metadata."""

    def __init__(
        self,
        schema_store: SchemaStore,
        stats_cache: StatsCache,
        compaction: CompactionCoordinator,
        schema_cache: SchemaCache,
        storage_backend: StorageBackend,
        codec: Optional[SettingsCodec] = None,
        metrics_collector: Optional[MetricsCollector] = None
    ):
        """Initialize the service.

        Args:
            schema_store: Versioned schema storage
            stats_cache: Stream statistics cache
            compaction: Compaction subsystem (pending deletes and offsets)
            schema_cache: In-process schema cache
            storage_backend: Deployment storage capability
            codec: Settings codec shared with the descriptor builder
            metrics_collector: Optional metrics collection system
        """
        self.schema_store = schema_store
        self.stats_cache = stats_cache
        self.compaction = compaction
        self.schema_cache = schema_cache
        self.codec = codec or SettingsCodec()
        self.builder = StreamDescriptorBuilder(storage_backend, self.codec)
        self.metrics_collector = metrics_collector

    # =====================
    # Read path
    # =====================

    async def get_stream(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> StreamDescriptor:
        """Describe a single stream.

        Raises:
            StreamNotFoundError: The stream has no schema fields.
            MalformedSettingsError: The stored settings cannot be parsed.
        """
        schema = await self.schema_store.get(org_id, stream_name, stream_type)
        if schema.is_empty:
            self._record("get_stream", "not_found")
            raise StreamNotFoundError(org_id, stream_name, StreamType(stream_type).value)

        stats = await self.stats_cache.get_stats(org_id, stream_name, stream_type)
        descriptor = self.builder.build(
            stream_name, stream_type, schema, normalize_stats(stats)
        )
        self._record("get_stream", "ok")
        return descriptor

    async def list_streams(
        self,
        org_id: str,
        stream_type: Optional[StreamType] = None,
        fetch_schema: bool = False
    ) -> List[StreamDescriptor]:
        """Describe every stream of an organization, in store listing order.

        Streams without recorded usage carry default statistics.
        """
        locations = await self.schema_store.list(org_id, stream_type, fetch_schema)

        descriptors = []
        for location in locations:
            stats = await self.stats_cache.get_stats(
                org_id, location.stream_name, location.stream_type
            )
            if stats == StreamStats():
                normalized = None
            else:
                normalized = normalize_stats(stats)
            descriptors.append(
                self.builder.build(
                    location.stream_name, location.stream_type, location.schema_, normalized
                )
            )

        logger.debug("Listed streams", org=org_id, stream_type=stream_type, count=len(descriptors))
        if self.metrics_collector:
            self.metrics_collector.record_listing(org_id, len(descriptors))
        self._record("list_streams", "ok")
        return descriptors

    # =====================
    # Settings
    # =====================

    async def save_settings(
        self,
        org_id: str,
        stream_name: str,
        stream_type: StreamType,
        settings: StreamSettings
    ) -> None:
        """Store new settings on the latest schema of a stream.

        Raises:
            StreamConflictError: The stream is pending deletion.
            StreamNotFoundError: The stream has no schema fields.
        """
        type_value = StreamType(stream_type).value
        if await self.compaction.is_pending_delete(org_id, stream_name, stream_type):
            logger.warning(
                "Rejected settings for stream being deleted",
                org=org_id, stream=stream_name, stream_type=type_value
            )
            self._record("save_settings", "conflict")
            raise StreamConflictError(org_id, stream_name, type_value)

        schema = await self.schema_store.get(org_id, stream_name, stream_type)
        if schema.is_empty:
            self._record("save_settings", "not_found")
            raise StreamNotFoundError(org_id, stream_name, type_value)

        metadata = self.codec.encode(schema.metadata, settings)
        logger.info("Saving settings for stream", org=org_id, stream=stream_name, stream_type=type_value)
        await self.schema_store.set(org_id, stream_name, stream_type, schema.with_metadata(metadata))
        self.schema_cache.remove(cache_key(org_id, stream_type, stream_name))
        self._record("save_settings", "ok")

    # =====================
    # Delete workflow
    # =====================

    async def delete_stream(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> DeleteResult:
        """Delete a stream and everything attached to it.

        Stages: mark pending delete in compaction, delete all schema versions,
        drop the cached schema and statistics, delete the compaction offset.

        Returns:
            DeleteResult listing the completed stages

        Raises:
            StreamNotFoundError: No schema version exists; nothing was touched.
            SubsystemFailure: A stage failed; later stages did not run.
        """
        type_value = StreamType(stream_type).value
        log = logger.bind(org=org_id, stream=stream_name, stream_type=type_value)
        result = DeleteResult(org_id=org_id, stream_name=stream_name, stream_type=stream_type)

        versions = await self.schema_store.get_versions(org_id, stream_name, stream_type)
        if not versions:
            log.info("Nothing to delete, stream has no schema")
            self._record("delete_stream", "not_found")
            raise StreamNotFoundError(org_id, stream_name, type_value)
        result.completed.append(DeleteStage.SCHEMA_CHECKED)
        result.stage = DeleteStage.SCHEMA_CHECKED

        async def clear_caches() -> None:
            self.schema_cache.remove(cache_key(org_id, stream_type, stream_name))
            await self.stats_cache.remove_stats(org_id, stream_name, stream_type)

        stages: List[Tuple[DeleteStage, Callable[[], Awaitable[None]]]] = [
            (
                DeleteStage.COMPACTION_MARKED,
                lambda: self.compaction.mark_pending_delete(org_id, stream_name, stream_type),
            ),
            (
                DeleteStage.SCHEMA_DELETED,
                lambda: self.schema_store.delete(org_id, stream_name, stream_type),
            ),
            (DeleteStage.CACHE_CLEARED, clear_caches),
            (
                DeleteStage.OFFSET_DELETED,
                lambda: self.compaction.delete_offset(org_id, stream_name, stream_type),
            ),
        ]

        for stage, step in stages:
            try:
                await step()
            except Exception as e:
                log.error(
                    "Stream delete failed",
                    stage=stage.value,
                    completed=[s.value for s in result.completed],
                    error=str(e)
                )
                self._record("delete_stream", "failed")
                if self.metrics_collector:
                    self.metrics_collector.record_delete_failure(stage.value)
                raise SubsystemFailure(stream_name, stage, e) from e
            result.completed.append(stage)
            result.stage = stage

        result.stage = DeleteStage.DONE
        log.info("Stream deleted", versions=len(versions))
        self._record("delete_stream", "ok")
        return result

    def _record(self, operation: str, outcome: str) -> None:
        if self.metrics_collector:
            self.metrics_collector.record_request(operation, outcome)


__all__ = ["StreamMetadataService", "DeleteResult"]
