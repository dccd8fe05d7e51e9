"""Data models for stream metadata.

This module defines Pydantic models for the stream metadata entities including:
- Stream schemas as stored by the schema store
- Stream settings decoded from schema metadata
- Usage statistics read from the stats cache
- The stream descriptor returned to callers
"""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class StreamType(str, Enum):
    """Types of ingested streams."""
    LOGS = "logs"
    METRICS = "metrics"
    TRACES = "traces"


class StorageType(str, Enum):
    """Storage backend labels exposed on stream descriptors."""
    DISK = "disk"  # Local-disk deployment
    S3 = "s3"      # Remote object storage


class SchemaField(BaseModel):
    """A single field of a stream schema."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(...)
    data_type: str = Field(...)


class StreamSchema(BaseModel):
    """One version of a stream schema: ordered fields plus string metadata."""

    fields: List[SchemaField] = Field(default_factory=list)
    metadata: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """An empty schema is the store's way of saying the stream does not exist."""
        return not self.fields

    def with_metadata(self, metadata: Dict[str, str]) -> "StreamSchema":
        """Return a copy of this schema carrying ``metadata``."""
        return StreamSchema(fields=list(self.fields), metadata=dict(metadata))


class StreamSettings(BaseModel):
    """Structured stream configuration kept in the ``settings`` metadata entry."""

    partition_keys: List[str] = Field(default_factory=list)
    full_text_search_keys: List[str] = Field(default_factory=list)
    skip_schema_validation: bool = False
    data_retention: int = 0


class StreamStats(BaseModel):
    """Usage counters for a stream.

    Sizes are bytes as recorded by ingestion; normalized copies carry MiB.
    """

    created_at: int = 0
    doc_time_min: int = 0
    doc_time_max: int = 0
    doc_num: int = 0
    file_num: int = 0
    storage_size: float = 0.0
    compressed_size: float = 0.0


class StreamProperty(BaseModel):
    """Name and declared type of a schema field."""

    name: str
    type: str


class StreamDescriptor(BaseModel):
    """Public representation of a stream, rebuilt on every read."""

    name: str
    stream_type: StreamType
    storage_type: StorageType
    schema_: List[StreamProperty] = Field(default_factory=list, alias="schema")
    stats: StreamStats = Field(default_factory=StreamStats)
    settings: StreamSettings = Field(default_factory=StreamSettings)

    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)


class StreamLocation(BaseModel):
    """A stream as returned by the schema store listing."""

    stream_name: str
    stream_type: StreamType
    schema_: StreamSchema = Field(default_factory=StreamSchema, alias="schema")

    model_config = ConfigDict(populate_by_name=True)


__all__ = [
    "StreamType",
    "StorageType",
    "SchemaField",
    "StreamSchema",
    "StreamSettings",
    "StreamStats",
    "StreamProperty",
    "StreamDescriptor",
    "StreamLocation",
]
