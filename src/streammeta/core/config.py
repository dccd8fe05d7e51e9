"""Configuration management for streammeta."""

from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class StorageConfig(BaseModel):
    """Storage deployment configuration."""

    backend: Literal["disk", "s3"] = Field(
        "disk", description="Where stream data lives: local disk or remote object storage"
    )

    def is_local_disk(self) -> bool:
        return self.backend == "disk"


class DatabaseConfig(BaseModel):
    """PostgreSQL configuration for schema and compaction metadata."""

    url: Optional[str] = Field(
        None, description="PostgreSQL connection URL (unset keeps metadata in memory)"
    )
    metadata_schema: str = Field("streammeta", description="Schema for metadata tables")
    min_pool_size: int = Field(1, ge=1, description="Minimum pool connections")
    max_pool_size: int = Field(10, ge=1, description="Maximum pool connections")

    @field_validator("max_pool_size")
    @classmethod
    def validate_pool_bounds(cls, v, info):
        """Ensure the pool maximum is not below its minimum."""
        minimum = info.data.get("min_pool_size", 1)
        if v < minimum:
            raise ValueError("max_pool_size must be >= min_pool_size")
        return v

    @field_validator("metadata_schema")
    @classmethod
    def validate_metadata_schema(cls, v):
        """Only plain identifiers are interpolated into SQL."""
        if not v.replace("_", "").isalnum() or v[0].isdigit():
            raise ValueError("metadata_schema must be a plain SQL identifier")
        return v


class PrometheusConfig(BaseModel):
    """Prometheus monitoring configuration."""

    enabled: bool = False
    port: int = 8080
    path: str = "/metrics"


class MonitoringConfig(BaseModel):
    """Monitoring and observability configuration."""

    prometheus: PrometheusConfig = PrometheusConfig()
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    structured_logging: bool = True


class ApiConfig(BaseModel):
    """HTTP API configuration."""

    host: str = Field("0.0.0.0", description="Host to bind to")
    port: int = Field(5080, description="Port to bind to")
    prefix: str = Field("/api", description="Path prefix of the stream routes")

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v):
        """Normalize to a leading slash without a trailing one."""
        v = "/" + v.strip("/")
        return "" if v == "/" else v


class StreamMetaConfig(BaseSettings):
    """Main configuration for streammeta."""

    storage: StorageConfig = StorageConfig()
    database: DatabaseConfig = DatabaseConfig()
    monitoring: MonitoringConfig = MonitoringConfig()
    api: ApiConfig = ApiConfig()

    model_config = {
        "env_prefix": "STREAMMETA_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "StreamMetaConfig":
        """Load configuration from YAML file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path) as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)
