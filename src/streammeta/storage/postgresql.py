"""PostgreSQL-backed collaborators.

Schema versions, compaction offsets and pending-delete marks live in the
metadata schema (see ``streammeta.storage.schema``). All mutations are
idempotent so the delete workflow can be re-run after a partial failure.
"""

import json
from typing import Any, Dict, List, Optional

import structlog
from asyncpg import Pool

from ..connectors.memory import InMemoryStatsCache
from ..streams.models import (
    SchemaField,
    StreamLocation,
    StreamSchema,
    StreamStats,
    StreamType,
)
from .schema import get_schema_cleanup_sql, get_schema_creation_sql

logger = structlog.get_logger(__name__)


def _load_json(value: Any) -> Any:
    """JSONB columns arrive as text unless a type codec is registered."""
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


def _row_to_schema(row) -> StreamSchema:
    fields = [SchemaField(**item) for item in _load_json(row["fields"]) or []]
    metadata = {str(k): str(v) for k, v in (_load_json(row["metadata"]) or {}).items()}
    return StreamSchema(fields=fields, metadata=metadata)


class _PostgresRepository:
    def __init__(self, connection_pool: Pool, metadata_schema: str = "streammeta"):
        """Initialize the repository.

        Args:
            connection_pool: AsyncPG connection pool for database operations
            metadata_schema: Schema name for metadata tables
        """
        self.pool = connection_pool
        self.metadata_schema = metadata_schema


class PostgresSchemaStore(_PostgresRepository):
    """Versioned stream schemas in PostgreSQL."""

    async def initialize(self) -> None:
        """Create metadata tables and indexes."""
        logger.info("Initializing metadata tables", schema=self.metadata_schema)
        async with self.pool.acquire() as conn:
            for sql in get_schema_creation_sql(self.metadata_schema):
                await conn.execute(sql)
        logger.info("Metadata tables created successfully")

    async def cleanup(self) -> None:
        """Drop the metadata schema (for testing/reset)."""
        logger.warning("Cleaning up metadata schema", schema=self.metadata_schema)
        async with self.pool.acquire() as conn:
            for sql in get_schema_cleanup_sql(self.metadata_schema):
                await conn.execute(sql)

    async def get(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> StreamSchema:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT fields, metadata
                FROM {self.metadata_schema}.stream_schemas
                WHERE org_id = $1 AND stream_type = $2 AND stream_name = $3
                ORDER BY version DESC LIMIT 1
                """,
                org_id, StreamType(stream_type).value, stream_name
            )
        return _row_to_schema(row) if row else StreamSchema()

    async def get_versions(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> List[StreamSchema]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT fields, metadata
                FROM {self.metadata_schema}.stream_schemas
                WHERE org_id = $1 AND stream_type = $2 AND stream_name = $3
                ORDER BY version ASC
                """,
                org_id, StreamType(stream_type).value, stream_name
            )
        return [_row_to_schema(row) for row in rows]

    async def set(
        self,
        org_id: str,
        stream_name: str,
        stream_type: StreamType,
        schema: StreamSchema
    ) -> None:
        type_value = StreamType(stream_type).value
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                # Serializes version allocation per stream until commit
                await conn.execute(
                    "SELECT pg_advisory_xact_lock(hashtext($1 || '/' || $2 || '/' || $3))",
                    org_id, type_value, stream_name
                )
                current_version = await conn.fetchval(
                    f"""
                    SELECT COALESCE(MAX(version), 0)
                    FROM {self.metadata_schema}.stream_schemas
                    WHERE org_id = $1 AND stream_type = $2 AND stream_name = $3
                    """,
                    org_id, type_value, stream_name
                )
                new_version = (current_version or 0) + 1
                await conn.execute(
                    f"""
                    INSERT INTO {self.metadata_schema}.stream_schemas
                        (org_id, stream_type, stream_name, version, fields, metadata)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    """,
                    org_id, type_value, stream_name, new_version,
                    json.dumps([field.model_dump() for field in schema.fields]),
                    json.dumps(schema.metadata)
                )

        logger.info(
            "Schema version stored",
            org=org_id,
            stream=stream_name,
            stream_type=type_value,
            version=new_version
        )

    async def delete(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                DELETE FROM {self.metadata_schema}.stream_schemas
                WHERE org_id = $1 AND stream_type = $2 AND stream_name = $3
                """,
                org_id, StreamType(stream_type).value, stream_name
            )

    async def list(
        self,
        org_id: str,
        stream_type: Optional[StreamType] = None,
        with_schema: bool = False
    ) -> List[StreamLocation]:
        params: List[Any] = [org_id]
        type_clause = ""
        if stream_type is not None:
            params.append(StreamType(stream_type).value)
            type_clause = "AND stream_type = $2"

        columns = "fields, metadata" if with_schema else "NULL AS fields, NULL AS metadata"
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT DISTINCT ON (stream_type, stream_name)
                       stream_type, stream_name, {columns}
                FROM {self.metadata_schema}.stream_schemas
                WHERE org_id = $1 {type_clause}
                ORDER BY stream_type, stream_name, version DESC
                """,
                *params
            )

        return [
            StreamLocation(
                stream_name=row["stream_name"],
                stream_type=StreamType(row["stream_type"]),
                schema=_row_to_schema(row) if with_schema else StreamSchema(),
            )
            for row in rows
        ]


class PostgresCompactionCoordinator(_PostgresRepository):
    """Compaction offsets and pending-delete marks in PostgreSQL."""

    async def mark_pending_delete(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                INSERT INTO {self.metadata_schema}.compaction_deletes
                    (org_id, stream_type, stream_name)
                VALUES ($1, $2, $3)
                ON CONFLICT (org_id, stream_type, stream_name) DO NOTHING
                """,
                org_id, StreamType(stream_type).value, stream_name
            )

    async def is_pending_delete(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> bool:
        async with self.pool.acquire() as conn:
            marked = await conn.fetchval(
                f"""
                SELECT EXISTS (
                    SELECT 1 FROM {self.metadata_schema}.compaction_deletes
                    WHERE org_id = $1 AND stream_type = $2 AND stream_name = $3
                )
                """,
                org_id, StreamType(stream_type).value, stream_name
            )
        return bool(marked)

    async def delete_offset(
        self, org_id: str, stream_name: str, stream_type: StreamType
    ) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                f"""
                DELETE FROM {self.metadata_schema}.compaction_offsets
                WHERE org_id = $1 AND stream_type = $2 AND stream_name = $3
                """,
                org_id, StreamType(stream_type).value, stream_name
            )


class PostgresStatsLoader(_PostgresRepository):
    """Loads ingestion statistics from PostgreSQL into the in-process cache."""

    async def load(self, cache: InMemoryStatsCache, org_id: Optional[str] = None) -> int:
        """Refresh ``cache`` from the stats table.

        Args:
            cache: Stats cache to populate
            org_id: Restrict to one organization (None for all)

        Returns:
            Number of streams loaded
        """
        where_clause = "WHERE org_id = $1" if org_id is not None else ""
        params = [org_id] if org_id is not None else []
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT org_id, stream_type, stream_name, created_at, doc_time_min,
                       doc_time_max, doc_num, file_num, storage_size, compressed_size
                FROM {self.metadata_schema}.stream_stats
                {where_clause}
                """,
                *params
            )

        for row in rows:
            stats: Dict[str, Any] = {
                key: row[key]
                for key in (
                    "created_at", "doc_time_min", "doc_time_max", "doc_num",
                    "file_num", "storage_size", "compressed_size",
                )
            }
            cache.set_stats(
                row["org_id"], row["stream_name"], StreamType(row["stream_type"]), StreamStats(**stats)
            )

        logger.debug("Loaded stream stats", org=org_id, streams=len(rows))
        return len(rows)


__all__ = ["PostgresSchemaStore", "PostgresCompactionCoordinator", "PostgresStatsLoader"]
