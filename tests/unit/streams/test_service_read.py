"""Tests for the stream metadata service read path."""

import pytest

from streammeta.streams.errors import MalformedSettingsError, StreamNotFoundError
from streammeta.streams.models import (
    SchemaField,
    StreamSchema,
    StreamStats,
    StreamType,
)
from streammeta.streams.stats import SIZE_IN_MB


def _schema(*names: str) -> StreamSchema:
    return StreamSchema(fields=[SchemaField(name=name, data_type="Utf8") for name in names])


@pytest.mark.asyncio
class TestGetStream:
    """Single stream lookups."""

    async def test_returns_descriptor_with_normalized_stats(self, service, collaborators, logs_schema):
        """Stats are normalized before being attached."""
        await collaborators["schema_store"].set("org1", "app_logs", StreamType.LOGS, logs_schema)
        collaborators["stats_cache"].set_stats(
            "org1", "app_logs", StreamType.LOGS,
            StreamStats(doc_num=10, storage_size=2097152.0, compressed_size=1048576.0),
        )

        stream = await service.get_stream("org1", "app_logs", StreamType.LOGS)

        assert stream.name == "app_logs"
        assert stream.stats.doc_num == 10
        assert stream.stats.storage_size == 2.0
        assert stream.stats.compressed_size == 1.0
        assert stream.settings.partition_keys == ["tenant", "region"]
        assert stream.storage_type == "disk"

    async def test_latest_schema_version_used(self, service, collaborators):
        """The latest version is described."""
        store = collaborators["schema_store"]
        await store.set("org1", "s", StreamType.LOGS, _schema("a"))
        await store.set("org1", "s", StreamType.LOGS, _schema("a", "b"))

        stream = await service.get_stream("org1", "s", StreamType.LOGS)

        assert [prop.name for prop in stream.schema_] == ["a", "b"]

    async def test_unknown_stream_not_found(self, service):
        """An unknown stream is reported as not found."""
        with pytest.raises(StreamNotFoundError) as exc_info:
            await service.get_stream("org1", "missing", StreamType.LOGS)

        assert exc_info.value.stream_name == "missing"
        assert exc_info.value.stream_type == "logs"

    async def test_empty_schema_not_found_even_with_stats(self, service, collaborators):
        """A schema without fields means the stream does not exist."""
        await collaborators["schema_store"].set(
            "org1", "hollow", StreamType.LOGS, StreamSchema(metadata={"created_at": "1"})
        )
        collaborators["stats_cache"].set_stats(
            "org1", "hollow", StreamType.LOGS, StreamStats(doc_num=5, storage_size=SIZE_IN_MB)
        )

        with pytest.raises(StreamNotFoundError):
            await service.get_stream("org1", "hollow", StreamType.LOGS)

    async def test_stream_types_are_distinct(self, service, collaborators):
        """The same name under another type is a different stream."""
        await collaborators["schema_store"].set("org1", "s", StreamType.METRICS, _schema("v"))

        with pytest.raises(StreamNotFoundError):
            await service.get_stream("org1", "s", StreamType.LOGS)

    async def test_malformed_settings_reported(self, service, collaborators):
        """Broken settings surface instead of being dropped."""
        schema = StreamSchema(
            fields=[SchemaField(name="a", data_type="Utf8")],
            metadata={"settings": "not json"},
        )
        await collaborators["schema_store"].set("org1", "s", StreamType.LOGS, schema)

        with pytest.raises(MalformedSettingsError):
            await service.get_stream("org1", "s", StreamType.LOGS)


@pytest.mark.asyncio
class TestListStreams:
    """Organization listings."""

    async def test_preserves_listing_order(self, service, collaborators):
        """Output order follows the store listing."""
        store = collaborators["schema_store"]
        for name in ("zeta", "alpha", "mid"):
            await store.set("org1", name, StreamType.LOGS, _schema("a"))

        streams = await service.list_streams("org1", fetch_schema=True)

        assert [stream.name for stream in streams] == ["zeta", "alpha", "mid"]

    async def test_default_stats_left_unnormalized(self, service, collaborators):
        """Streams without usage carry the default stats."""
        store = collaborators["schema_store"]
        await store.set("org1", "idle", StreamType.LOGS, _schema("a"))
        await store.set("org1", "busy", StreamType.LOGS, _schema("a"))
        collaborators["stats_cache"].set_stats(
            "org1", "busy", StreamType.LOGS,
            StreamStats(doc_num=3, storage_size=3 * SIZE_IN_MB, compressed_size=SIZE_IN_MB / 2),
        )

        idle, busy = await service.list_streams("org1")

        assert idle.stats == StreamStats()
        assert busy.stats.storage_size == 3.0
        assert busy.stats.compressed_size == 0.5
        assert busy.stats.doc_num == 3

    async def test_filters_by_type(self, service, collaborators):
        """Only the requested stream type is listed."""
        store = collaborators["schema_store"]
        await store.set("org1", "logs_a", StreamType.LOGS, _schema("a"))
        await store.set("org1", "cpu", StreamType.METRICS, _schema("v"))

        streams = await service.list_streams("org1", StreamType.METRICS)

        assert [stream.name for stream in streams] == ["cpu"]
        assert streams[0].stream_type == StreamType.METRICS

    async def test_without_schema(self, service, collaborators, logs_schema):
        """Listings without schemas carry no properties and default settings."""
        await collaborators["schema_store"].set("org1", "app_logs", StreamType.LOGS, logs_schema)

        with_schema, = await service.list_streams("org1", fetch_schema=True)
        without_schema, = await service.list_streams("org1", fetch_schema=False)

        assert len(with_schema.schema_) == 2
        assert with_schema.settings.data_retention == 30
        assert without_schema.schema_ == []
        assert without_schema.settings.data_retention == 0

    async def test_other_orgs_excluded(self, service, collaborators):
        """Listings are scoped to one organization."""
        await collaborators["schema_store"].set("org2", "s", StreamType.LOGS, _schema("a"))

        assert await service.list_streams("org1") == []
