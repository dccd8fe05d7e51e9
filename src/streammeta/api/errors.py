"""Mapping of stream metadata errors onto HTTP responses."""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.logging import get_logger
from ..streams.errors import (
    MalformedSettingsError,
    StreamConflictError,
    StreamMetaError,
    StreamNotFoundError,
    SubsystemFailure,
)

logger = get_logger(__name__)


def create_error_response(
    status_code: int,
    message: str,
    stage: Optional[str] = None,
) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={"code": status_code, "message": message, "stage": stage},
    )


async def handle_not_found(request: Request, exc: StreamNotFoundError) -> JSONResponse:
    return create_error_response(404, str(exc))


async def handle_conflict(request: Request, exc: StreamConflictError) -> JSONResponse:
    return create_error_response(409, str(exc))


async def handle_malformed_settings(request: Request, exc: MalformedSettingsError) -> JSONResponse:
    logger.warning("Malformed stream settings", path=request.url.path, reason=exc.reason)
    return create_error_response(422, str(exc))


async def handle_subsystem_failure(request: Request, exc: SubsystemFailure) -> JSONResponse:
    logger.error(
        "Stream operation failed",
        path=request.url.path,
        stage=exc.stage.value,
        error=str(exc.cause)
    )
    return create_error_response(500, str(exc), stage=exc.stage.value)


async def handle_stream_error(request: Request, exc: StreamMetaError) -> JSONResponse:
    logger.error("Stream operation failed", path=request.url.path, error=str(exc))
    return create_error_response(500, str(exc))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Collaborator failures outside the delete workflow."""
    logger.error(
        "Unhandled error",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc)
    )
    return create_error_response(500, "internal error")


def register_error_handlers(app: FastAPI) -> None:
    """Install the handlers for the stream error taxonomy."""
    app.add_exception_handler(StreamNotFoundError, handle_not_found)
    app.add_exception_handler(StreamConflictError, handle_conflict)
    app.add_exception_handler(MalformedSettingsError, handle_malformed_settings)
    app.add_exception_handler(SubsystemFailure, handle_subsystem_failure)
    app.add_exception_handler(StreamMetaError, handle_stream_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
