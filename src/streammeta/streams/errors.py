"""Exceptions raised by the stream metadata service.

``StreamNotFoundError`` and ``StreamConflictError`` are expected outcomes that
callers turn into user-facing responses. ``SubsystemFailure`` names the
teardown stage that failed so an operator knows where a retry resumes.
"""

from enum import Enum
from typing import Optional


class DeleteStage(str, Enum):
    """States of the stream delete workflow, in execution order."""
    START = "start"
    SCHEMA_CHECKED = "schema_checked"
    COMPACTION_MARKED = "compaction_marked"
    SCHEMA_DELETED = "schema_deleted"
    CACHE_CLEARED = "cache_cleared"
    OFFSET_DELETED = "offset_deleted"
    DONE = "done"


class StreamMetaError(Exception):
    """Base class for stream metadata errors."""


class StreamNotFoundError(StreamMetaError):
    """Raised when a stream, or its schema, does not exist."""

    def __init__(self, org_id: str, stream_name: str, stream_type: str):
        self.org_id = org_id
        self.stream_name = stream_name
        self.stream_type = stream_type
        super().__init__("stream not found")


class StreamConflictError(StreamMetaError):
    """Raised when writing to a stream that is pending deletion."""

    def __init__(self, org_id: str, stream_name: str, stream_type: str):
        self.org_id = org_id
        self.stream_name = stream_name
        self.stream_type = stream_type
        super().__init__(f"stream [{stream_name}] is being deleted")


class MalformedSettingsError(StreamMetaError):
    """Raised when a present ``settings`` blob cannot be parsed."""

    def __init__(self, reason: str, stream_name: Optional[str] = None):
        self.reason = reason
        self.stream_name = stream_name
        prefix = f"stream [{stream_name}] has " if stream_name else ""
        super().__init__(f"{prefix}malformed settings: {reason}")


class SubsystemFailure(StreamMetaError):
    """Raised when a collaborator call fails during the delete workflow."""

    def __init__(self, stream_name: str, stage: DeleteStage, cause: BaseException):
        self.stream_name = stream_name
        self.stage = stage
        self.cause = cause
        super().__init__(
            f"failed to delete stream [{stream_name}] at stage {stage.value}: {cause}"
        )


__all__ = [
    "DeleteStage",
    "StreamMetaError",
    "StreamNotFoundError",
    "StreamConflictError",
    "MalformedSettingsError",
    "SubsystemFailure",
]
