"""PostgreSQL persistence for stream metadata."""

from .postgresql import PostgresCompactionCoordinator, PostgresSchemaStore, PostgresStatsLoader
from .schema import (
    METADATA_TABLES_SQL,
    TABLE_CREATION_ORDER,
    get_schema_cleanup_sql,
    get_schema_creation_sql,
)

__all__ = [
    "PostgresSchemaStore",
    "PostgresCompactionCoordinator",
    "PostgresStatsLoader",
    "get_schema_creation_sql",
    "get_schema_cleanup_sql",
    "METADATA_TABLES_SQL",
    "TABLE_CREATION_ORDER",
]
