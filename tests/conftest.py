"""Test configuration for streammeta."""

import pytest

from streammeta.connectors.memory import (
    InMemoryCompactionCoordinator,
    InMemorySchemaCache,
    InMemorySchemaStore,
    InMemoryStatsCache,
)
from streammeta.connectors.storage_backend import StaticStorageBackend
from streammeta.streams.models import SchemaField, StreamSchema
from streammeta.streams.service import StreamMetadataService
from streammeta.streams.settings_codec import SettingsCodec

FIXED_MICROS = 1_700_000_000_000_000


@pytest.fixture
def codec():
    """Settings codec with a fixed clock."""
    return SettingsCodec(clock=lambda: FIXED_MICROS)


@pytest.fixture
def collaborators():
    """In-memory collaborators of the stream metadata service."""
    return {
        "schema_store": InMemorySchemaStore(),
        "stats_cache": InMemoryStatsCache(),
        "compaction": InMemoryCompactionCoordinator(),
        "schema_cache": InMemorySchemaCache(),
        "storage_backend": StaticStorageBackend(local_disk=True),
    }


@pytest.fixture
def service(collaborators, codec):
    """Stream metadata service over in-memory collaborators."""
    return StreamMetadataService(codec=codec, **collaborators)


@pytest.fixture
def logs_schema():
    """A two-field logs schema with settings."""
    return StreamSchema(
        fields=[
            SchemaField(name="_timestamp", data_type="Int64"),
            SchemaField(name="message", data_type="Utf8"),
        ],
        metadata={
            "created_at": "1690000000000000",
            "settings": '{"partition_keys":{"L1":"region","L0":"tenant"},'
                        '"full_text_search_keys":["message"],'
                        '"data_retention":30,"skip_schema_validation":true}',
        },
    )


@pytest.fixture
def sample_config_file(tmp_path):
    """Create a sample configuration file for testing."""
    config_content = """
storage:
  backend: s3

database:
  metadata_schema: "stream_meta_test"
  min_pool_size: 2
  max_pool_size: 4

api:
  prefix: "/api/v1/"

monitoring:
  prometheus:
    enabled: false
  log_level: "DEBUG"
  structured_logging: false
"""

    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content)
    return config_file
