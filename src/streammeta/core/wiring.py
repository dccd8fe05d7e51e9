"""Assembly of the stream metadata service from configuration."""

from typing import Optional

import asyncpg
import structlog
from asyncpg import Pool

from ..connectors.memory import (
    InMemoryCompactionCoordinator,
    InMemorySchemaCache,
    InMemorySchemaStore,
    InMemoryStatsCache,
)
from ..connectors.storage_backend import ConfiguredStorageBackend
from ..monitoring.metrics import MetricsCollector
from ..storage.postgresql import PostgresCompactionCoordinator, PostgresSchemaStore
from ..streams.service import StreamMetadataService
from .config import StreamMetaConfig

logger = structlog.get_logger(__name__)


async def create_pool(config: StreamMetaConfig) -> Pool:
    """Open the asyncpg pool described by ``config.database``."""
    if not config.database.url:
        raise ValueError("database.url is not configured")

    logger.info("Connecting to metadata database", schema=config.database.metadata_schema)
    return await asyncpg.create_pool(
        config.database.url,
        min_size=config.database.min_pool_size,
        max_size=config.database.max_pool_size,
    )


def build_service(
    config: StreamMetaConfig,
    pool: Optional[Pool] = None,
    stats_cache: Optional[InMemoryStatsCache] = None,
    metrics_collector: Optional[MetricsCollector] = None
) -> StreamMetadataService:
    """Build a service; PostgreSQL collaborators when a pool is given.

    The schema and stats caches are always process-local.
    """
    if pool is not None:
        schema_store = PostgresSchemaStore(pool, config.database.metadata_schema)
        compaction = PostgresCompactionCoordinator(pool, config.database.metadata_schema)
    else:
        schema_store = InMemorySchemaStore()
        compaction = InMemoryCompactionCoordinator()

    return StreamMetadataService(
        schema_store=schema_store,
        stats_cache=stats_cache if stats_cache is not None else InMemoryStatsCache(),
        compaction=compaction,
        schema_cache=InMemorySchemaCache(),
        storage_backend=ConfiguredStorageBackend(config.storage),
        metrics_collector=metrics_collector,
    )
