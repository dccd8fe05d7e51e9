"""Tests for streammeta configuration."""

import pytest
from pydantic import ValidationError

from streammeta.core.config import DatabaseConfig, PrometheusConfig, StreamMetaConfig


def test_load_config_from_file(sample_config_file):
    """Test loading configuration from YAML file."""
    config = StreamMetaConfig.from_file(sample_config_file)

    assert config.storage.backend == "s3"
    assert config.storage.is_local_disk() is False
    assert config.database.url is None
    assert config.database.metadata_schema == "stream_meta_test"
    assert config.database.max_pool_size == 4
    assert config.api.prefix == "/api/v1"
    assert config.monitoring.log_level == "DEBUG"
    assert config.monitoring.structured_logging is False


def test_config_defaults():
    """Test defaults when nothing is configured."""
    config = StreamMetaConfig()

    assert config.storage.backend == "disk"
    assert config.storage.is_local_disk() is True
    assert config.database.metadata_schema == "streammeta"
    assert config.api.prefix == "/api"


def test_missing_config_file(tmp_path):
    """Test a missing configuration file."""
    with pytest.raises(FileNotFoundError, match="Configuration file not found"):
        StreamMetaConfig.from_file(tmp_path / "missing.yaml")


def test_empty_config_file(tmp_path):
    """An empty YAML file yields the defaults."""
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("")

    config = StreamMetaConfig.from_file(config_file)
    assert config.storage.backend == "disk"


def test_config_validation():
    """Test configuration validation."""
    with pytest.raises(ValidationError):
        StreamMetaConfig(storage={"backend": "tape"})

    with pytest.raises(ValidationError, match="max_pool_size must be >= min_pool_size"):
        DatabaseConfig(min_pool_size=5, max_pool_size=2)

    with pytest.raises(ValidationError, match="plain SQL identifier"):
        DatabaseConfig(metadata_schema="meta; DROP TABLE x")


def test_environment_overrides(monkeypatch):
    """Nested settings can come from the environment."""
    monkeypatch.setenv("STREAMMETA_STORAGE__BACKEND", "s3")

    config = StreamMetaConfig()
    assert config.storage.backend == "s3"


def test_prometheus_config_defaults():
    """Test default Prometheus configuration."""
    config = PrometheusConfig()
    assert config.enabled is False
    assert config.port == 8080
    assert config.path == "/metrics"
