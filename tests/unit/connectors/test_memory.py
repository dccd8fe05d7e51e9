"""Tests for the in-memory collaborators."""

import pytest

from streammeta.connectors.base import (
    CompactionCoordinator,
    SchemaCache,
    SchemaStore,
    StatsCache,
    StorageBackend,
    cache_key,
)
from streammeta.connectors.memory import (
    InMemoryCompactionCoordinator,
    InMemorySchemaCache,
    InMemorySchemaStore,
    InMemoryStatsCache,
)
from streammeta.connectors.storage_backend import ConfiguredStorageBackend, StaticStorageBackend
from streammeta.core.config import StorageConfig
from streammeta.streams.models import SchemaField, StreamSchema, StreamStats, StreamType


def test_cache_key_uses_type_value():
    """Keys are plain strings ordered org, type, name."""
    assert cache_key("org1", StreamType.TRACES, "spans") == ("org1", "traces", "spans")
    assert cache_key("org1", "traces", "spans") == ("org1", "traces", "spans")


def test_implementations_satisfy_protocols():
    """The in-memory classes implement the collaborator protocols."""
    assert isinstance(InMemorySchemaStore(), SchemaStore)
    assert isinstance(InMemoryStatsCache(), StatsCache)
    assert isinstance(InMemoryCompactionCoordinator(), CompactionCoordinator)
    assert isinstance(InMemorySchemaCache(), SchemaCache)
    assert isinstance(StaticStorageBackend(), StorageBackend)


@pytest.mark.parametrize("backend,expected", [("disk", True), ("s3", False)])
def test_configured_storage_backend(backend, expected):
    """The configured backend answers the local disk query."""
    assert ConfiguredStorageBackend(StorageConfig(backend=backend)).is_local_disk_backend() is expected


@pytest.mark.asyncio
class TestInMemorySchemaStore:

    async def test_missing_stream_is_empty(self):
        store = InMemorySchemaStore()

        assert (await store.get("org1", "s", StreamType.LOGS)).is_empty
        assert await store.get_versions("org1", "s", StreamType.LOGS) == []

    async def test_delete_is_idempotent(self):
        store = InMemorySchemaStore()
        await store.set("org1", "s", StreamType.LOGS, StreamSchema(fields=[SchemaField(name="a", data_type="Utf8")]))

        await store.delete("org1", "s", StreamType.LOGS)
        await store.delete("org1", "s", StreamType.LOGS)

        assert await store.get_versions("org1", "s", StreamType.LOGS) == []

    async def test_injected_failure_raised(self):
        store = InMemorySchemaStore()
        store.fail("get", RuntimeError("down"))

        with pytest.raises(RuntimeError, match="down"):
            await store.get("org1", "s", StreamType.LOGS)

        store.clear_failures()
        assert (await store.get("org1", "s", StreamType.LOGS)).is_empty
        assert store.calls == ["get", "get"]


@pytest.mark.asyncio
class TestInMemoryStatsCache:

    async def test_returns_copy(self):
        cache = InMemoryStatsCache()
        cache.set_stats("org1", "s", StreamType.LOGS, StreamStats(doc_num=1))

        stats = await cache.get_stats("org1", "s", StreamType.LOGS)
        stats.doc_num = 99

        assert (await cache.get_stats("org1", "s", StreamType.LOGS)).doc_num == 1

    async def test_missing_is_default(self):
        assert await InMemoryStatsCache().get_stats("org1", "s", StreamType.LOGS) == StreamStats()


@pytest.mark.asyncio
async def test_compaction_mark_and_offset_idempotent():
    """Marks and offset deletes can be repeated."""
    compaction = InMemoryCompactionCoordinator()
    compaction.set_offset("org1", "s", StreamType.LOGS, 10)

    await compaction.mark_pending_delete("org1", "s", StreamType.LOGS)
    await compaction.mark_pending_delete("org1", "s", StreamType.LOGS)
    await compaction.delete_offset("org1", "s", StreamType.LOGS)
    await compaction.delete_offset("org1", "s", StreamType.LOGS)

    assert await compaction.is_pending_delete("org1", "s", StreamType.LOGS)
    assert not await compaction.is_pending_delete("org1", "s", StreamType.METRICS)
    assert compaction.offsets == {}


def test_schema_cache_remove_missing_is_noop():
    cache = InMemorySchemaCache()
    key = cache_key("org1", StreamType.LOGS, "s")
    cache.put(key, StreamSchema())

    cache.remove(key)
    cache.remove(key)

    assert key not in cache
    assert len(cache) == 0
