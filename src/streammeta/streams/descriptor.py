"""Assembly of stream descriptors from schema, settings and statistics."""

from typing import Optional

from ..connectors.base import StorageBackend
from .models import (
    StorageType,
    StreamDescriptor,
    StreamProperty,
    StreamSchema,
    StreamStats,
    StreamType,
)
from .settings_codec import CREATED_AT_KEY, SettingsCodec


class StreamDescriptorBuilder:
    """Builds the public ``StreamDescriptor`` of a stream."""

    def __init__(self, storage_backend: StorageBackend, codec: Optional[SettingsCodec] = None):
        """Initialize the builder.

        Args:
            storage_backend: Deployment storage capability, queried on every build
            codec: Settings codec (a default codec when omitted)
        """
        self.storage_backend = storage_backend
        self.codec = codec or SettingsCodec()

    def build(
        self,
        stream_name: str,
        stream_type: StreamType,
        schema: StreamSchema,
        stats: Optional[StreamStats] = None
    ) -> StreamDescriptor:
        """Build a descriptor.

        Args:
            stream_name: Name of the stream
            stream_type: Type of the stream
            schema: Latest schema of the stream
            stats: Normalized statistics, None when the stream has no usage yet

        Returns:
            StreamDescriptor for the stream

        Raises:
            MalformedSettingsError: The schema carries unparseable settings.
        """
        properties = [
            StreamProperty(name=field.name, type=field.data_type) for field in schema.fields
        ]

        metadata = dict(schema.metadata)
        metadata.pop(CREATED_AT_KEY, None)
        settings = self.codec.decode(metadata, stream_name=stream_name)

        storage_type = (
            StorageType.DISK if self.storage_backend.is_local_disk_backend() else StorageType.S3
        )

        return StreamDescriptor(
            name=stream_name,
            stream_type=stream_type,
            storage_type=storage_type,
            schema=properties,
            stats=stats if stats is not None else StreamStats(),
            settings=settings,
        )
