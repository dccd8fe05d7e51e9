"""Stream metadata endpoints."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request

from ..core.logging import get_logger
from ..streams.models import StreamSettings, StreamType
from ..streams.service import StreamMetadataService

logger = get_logger(__name__)
router = APIRouter()


def get_service(request: Request) -> StreamMetadataService:
    """Service attached to the application at startup."""
    return request.app.state.stream_service


@router.get("/{org_id}/streams")
async def list_streams(
    org_id: str,
    stream_type: Optional[StreamType] = Query(None, alias="type"),
    fetch_schema: bool = Query(False),
    service: StreamMetadataService = Depends(get_service),
) -> Dict[str, Any]:
    """List the streams of an organization."""
    streams = await service.list_streams(org_id, stream_type, fetch_schema)
    return {"list": [stream.model_dump(by_alias=True) for stream in streams]}


@router.get("/{org_id}/{stream_name}/schema")
async def get_stream(
    org_id: str,
    stream_name: str,
    stream_type: StreamType = Query(StreamType.LOGS, alias="type"),
    service: StreamMetadataService = Depends(get_service),
) -> Dict[str, Any]:
    """Describe a stream: schema, settings and statistics."""
    stream = await service.get_stream(org_id, stream_name, stream_type)
    return stream.model_dump(by_alias=True)


@router.post("/{org_id}/{stream_name}/settings")
async def save_settings(
    org_id: str,
    stream_name: str,
    settings: StreamSettings,
    stream_type: StreamType = Query(StreamType.LOGS, alias="type"),
    service: StreamMetadataService = Depends(get_service),
) -> Dict[str, Any]:
    """Replace the settings of a stream."""
    await service.save_settings(org_id, stream_name, stream_type, settings)
    return {"code": 200, "message": ""}


@router.delete("/{org_id}/{stream_name}")
async def delete_stream(
    org_id: str,
    stream_name: str,
    stream_type: StreamType = Query(StreamType.LOGS, alias="type"),
    service: StreamMetadataService = Depends(get_service),
) -> Dict[str, Any]:
    """Delete a stream with its schema, caches and compaction offset."""
    await service.delete_stream(org_id, stream_name, stream_type)
    return {"code": 200, "message": "stream deleted"}
