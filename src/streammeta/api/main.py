"""Main FastAPI application."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from .. import __version__
from ..core.config import StreamMetaConfig
from ..core.logging import get_logger, setup_logging
from ..core.wiring import build_service, create_pool
from ..monitoring.metrics import MetricsCollector
from ..storage.postgresql import PostgresStatsLoader
from ..streams.service import StreamMetadataService
from . import routes
from .errors import register_error_handlers

logger = get_logger(__name__)


def _lifespan(config: StreamMetaConfig, metrics: MetricsCollector):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        logger.info("Starting streammeta", version=__version__, storage=config.storage.backend)
        pool = None
        try:
            if getattr(app.state, "stream_service", None) is None:
                if config.database.url:
                    pool = await create_pool(config)
                    service = build_service(config, pool, metrics_collector=metrics)
                    await PostgresStatsLoader(pool, config.database.metadata_schema).load(
                        service.stats_cache
                    )
                else:
                    service = build_service(config, metrics_collector=metrics)
                app.state.stream_service = service
            await metrics.start_server()
            yield
        except Exception as e:
            logger.error("Failed to start application", error=str(e))
            raise
        finally:
            logger.info("Shutting down streammeta")
            await metrics.stop_server()
            if pool is not None:
                await pool.close()

    return lifespan


def create_app(
    config: Optional[StreamMetaConfig] = None,
    service: Optional[StreamMetadataService] = None,
    configure_logging: bool = True
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Application configuration (environment defaults when omitted)
        service: Pre-built service; built from ``config`` at startup when omitted
        configure_logging: Install the structlog configuration
    """
    config = config or StreamMetaConfig()
    if configure_logging:
        setup_logging(config.monitoring)

    metrics = MetricsCollector(config.monitoring.prometheus)
    app = FastAPI(
        title="streammeta",
        version=__version__,
        description="Stream schema, settings and lifecycle metadata",
        lifespan=_lifespan(config, metrics),
    )
    app.state.stream_service = service
    app.state.config = config

    register_error_handlers(app)
    app.include_router(routes.router, prefix=config.api.prefix, tags=["streams"])

    return app
