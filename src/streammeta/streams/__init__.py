"""Stream metadata: models, settings codec, statistics and errors.

This package provides:
- Stream schema, settings, statistics and descriptor models
- The codec between schema metadata and stream settings
- Statistics normalization for display
- The stream metadata service (see ``streammeta.streams.service``)
"""

from .errors import (
    DeleteStage,
    MalformedSettingsError,
    StreamConflictError,
    StreamMetaError,
    StreamNotFoundError,
    SubsystemFailure,
)
from .models import (
    SchemaField,
    StorageType,
    StreamDescriptor,
    StreamLocation,
    StreamProperty,
    StreamSchema,
    StreamSettings,
    StreamStats,
    StreamType,
)
from .settings_codec import SettingsCodec
from .stats import normalize_stats

__all__ = [
    # Errors
    "DeleteStage",
    "StreamMetaError",
    "StreamNotFoundError",
    "StreamConflictError",
    "MalformedSettingsError",
    "SubsystemFailure",

    # Models
    "StreamType",
    "StorageType",
    "SchemaField",
    "StreamSchema",
    "StreamSettings",
    "StreamStats",
    "StreamProperty",
    "StreamDescriptor",
    "StreamLocation",

    # Codec and statistics
    "SettingsCodec",
    "normalize_stats",
]
