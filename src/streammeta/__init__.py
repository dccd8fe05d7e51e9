"""
streammeta: Stream Metadata Lifecycle

Schema, settings and usage metadata for ingested streams, and the staged
teardown of everything attached to a stream when it is deleted.
"""

__version__ = "0.1.0"

from .core.config import StreamMetaConfig
from .streams.service import DeleteResult, StreamMetadataService

__all__ = ["StreamMetaConfig", "StreamMetadataService", "DeleteResult"]
