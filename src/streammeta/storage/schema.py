"""Database schema definitions for stream metadata.

This module defines the SQL schema for:
- Versioned stream schemas
- Stream statistics written by ingestion
- Compaction offsets and pending-delete marks
"""

from typing import Dict, List

METADATA_TABLES_SQL: Dict[str, str] = {
    "stream_schemas": """
    CREATE TABLE IF NOT EXISTS streammeta.stream_schemas (
        id BIGSERIAL PRIMARY KEY,
        org_id VARCHAR(255) NOT NULL,
        stream_type VARCHAR(50) NOT NULL, -- 'logs', 'metrics', 'traces'
        stream_name VARCHAR(255) NOT NULL,
        version INTEGER NOT NULL DEFAULT 1,
        fields JSONB NOT NULL, -- [{"name": ..., "data_type": ...}]
        metadata JSONB NOT NULL DEFAULT '{}'::jsonb, -- string map, holds 'settings' and 'created_at'
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),

        CONSTRAINT uk_stream_schemas_stream_version
            UNIQUE (org_id, stream_type, stream_name, version)
    );

    CREATE INDEX IF NOT EXISTS idx_stream_schemas_org ON streammeta.stream_schemas (org_id, stream_type);
    """,

    "stream_stats": """
    CREATE TABLE IF NOT EXISTS streammeta.stream_stats (
        org_id VARCHAR(255) NOT NULL,
        stream_type VARCHAR(50) NOT NULL,
        stream_name VARCHAR(255) NOT NULL,
        created_at BIGINT NOT NULL DEFAULT 0,
        doc_time_min BIGINT NOT NULL DEFAULT 0,
        doc_time_max BIGINT NOT NULL DEFAULT 0,
        doc_num BIGINT NOT NULL DEFAULT 0,
        file_num BIGINT NOT NULL DEFAULT 0,
        storage_size DOUBLE PRECISION NOT NULL DEFAULT 0, -- bytes
        compressed_size DOUBLE PRECISION NOT NULL DEFAULT 0, -- bytes

        PRIMARY KEY (org_id, stream_type, stream_name)
    );
    """,

    "compaction_offsets": """
    CREATE TABLE IF NOT EXISTS streammeta.compaction_offsets (
        org_id VARCHAR(255) NOT NULL,
        stream_type VARCHAR(50) NOT NULL,
        stream_name VARCHAR(255) NOT NULL,
        "offset" BIGINT NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),

        PRIMARY KEY (org_id, stream_type, stream_name)
    );
    """,

    "compaction_deletes": """
    CREATE TABLE IF NOT EXISTS streammeta.compaction_deletes (
        org_id VARCHAR(255) NOT NULL,
        stream_type VARCHAR(50) NOT NULL,
        stream_name VARCHAR(255) NOT NULL,
        marked_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),

        PRIMARY KEY (org_id, stream_type, stream_name)
    );
    """,
}

TABLE_CREATION_ORDER = [
    "stream_schemas",
    "stream_stats",
    "compaction_offsets",
    "compaction_deletes",
]


def get_schema_creation_sql(schema_name: str = "streammeta") -> List[str]:
    """Get SQL statements for creating the metadata schema in order.

    Args:
        schema_name: Name of the schema to create (default: streammeta)

    Returns:
        List of SQL statements to execute in order
    """
    statements = [f'CREATE SCHEMA IF NOT EXISTS "{schema_name}";']

    for table_name in TABLE_CREATION_ORDER:
        sql = METADATA_TABLES_SQL[table_name].replace("streammeta.", f"{schema_name}.")
        statements.append(sql)

    return statements


def get_schema_cleanup_sql(schema_name: str = "streammeta") -> List[str]:
    """Get SQL statements for dropping the metadata schema."""
    statements = [
        f'DROP TABLE IF EXISTS "{schema_name}".{table_name} CASCADE;'
        for table_name in reversed(TABLE_CREATION_ORDER)
    ]
    statements.append(f'DROP SCHEMA IF EXISTS "{schema_name}" CASCADE;')
    return statements
