"""Codec between schema metadata and structured stream settings."""

import json
import time
from typing import Any, Callable, Dict, List, Mapping, Optional

import structlog

from .errors import MalformedSettingsError
from .models import StreamSchema, StreamSettings

logger = structlog.get_logger(__name__)

SETTINGS_KEY = "settings"
CREATED_AT_KEY = "created_at"


def _now_micros() -> int:
    return time.time_ns() // 1000


def _partition_labels(count: int) -> List[str]:
    """Labels whose lexical order matches their position.

    Up to ten keys this yields the historical ``L0``..``L9`` labels.
    """
    width = len(str(max(count - 1, 0)))
    return [f"L{index:0{width}d}" for index in range(count)]


def _string_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    if not all(isinstance(item, str) for item in value):
        return None
    return list(value)


class SettingsCodec:
    """Reads and writes ``StreamSettings`` inside schema metadata.

    Settings live as a JSON object under the ``settings`` metadata key.
    Partition keys are stored as an object of ``label -> field name``;
    their order is recovered by sorting on the label.
    """

    def __init__(self, clock: Callable[[], int] = _now_micros):
        """Initialize the codec.

        Args:
            clock: Returns the current time in microseconds since the epoch,
                used to stamp ``created_at`` on first write.
        """
        self.clock = clock

    def decode(
        self,
        metadata: Mapping[str, str],
        stream_name: Optional[str] = None
    ) -> StreamSettings:
        """Decode stream settings from schema metadata.

        Missing or mistyped entries fall back to the field default.

        Args:
            metadata: Schema metadata mapping
            stream_name: Stream name, only used in error messages

        Returns:
            Decoded StreamSettings

        Raises:
            MalformedSettingsError: The settings entry is present but is not
                a JSON object.
        """
        raw = metadata.get(SETTINGS_KEY)
        if raw is None:
            return StreamSettings()

        settings = self._load(raw, stream_name)

        skip_schema_validation = settings.get("skip_schema_validation")
        if not isinstance(skip_schema_validation, bool):
            skip_schema_validation = False

        data_retention = settings.get("data_retention")
        if not isinstance(data_retention, int) or isinstance(data_retention, bool):
            data_retention = 0

        return StreamSettings(
            partition_keys=self._decode_partition_keys(settings.get("partition_keys")),
            full_text_search_keys=_string_list(settings.get("full_text_search_keys")) or [],
            skip_schema_validation=skip_schema_validation,
            data_retention=data_retention,
        )

    def encode(
        self,
        metadata: Mapping[str, str],
        settings: StreamSettings
    ) -> Dict[str, str]:
        """Return a copy of ``metadata`` carrying ``settings``.

        ``created_at`` is stamped only when the metadata has none.
        """
        labels = _partition_labels(len(settings.partition_keys))
        payload = {
            "partition_keys": dict(zip(labels, settings.partition_keys)),
            "full_text_search_keys": list(settings.full_text_search_keys),
            "data_retention": settings.data_retention,
            "skip_schema_validation": settings.skip_schema_validation,
        }

        updated = dict(metadata)
        updated[SETTINGS_KEY] = json.dumps(payload, separators=(",", ":"))
        if CREATED_AT_KEY not in updated:
            updated[CREATED_AT_KEY] = str(self.clock())
        return updated

    def full_text_search_fields(self, schema: StreamSchema) -> List[str]:
        """Full-text-search fields configured for a schema."""
        return self.decode(schema.metadata).full_text_search_keys

    @staticmethod
    def _load(raw: str, stream_name: Optional[str]) -> Dict[str, Any]:
        try:
            settings = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Unparseable stream settings", stream=stream_name, error=str(e))
            raise MalformedSettingsError(str(e), stream_name) from e

        if not isinstance(settings, dict):
            logger.warning(
                "Stream settings are not an object",
                stream=stream_name,
                settings_type=type(settings).__name__
            )
            raise MalformedSettingsError(
                f"expected a JSON object, got {type(settings).__name__}", stream_name
            )
        return settings

    @staticmethod
    def _decode_partition_keys(value: Any) -> List[str]:
        if not isinstance(value, dict):
            return []
        if not all(isinstance(item, str) for item in value.values()):
            return []
        return [field for _, field in sorted(value.items(), key=lambda item: item[0])]


__all__ = ["SettingsCodec", "SETTINGS_KEY", "CREATED_AT_KEY"]
