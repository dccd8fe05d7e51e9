"""Logging configuration for streammeta."""

import logging
from typing import Optional

import structlog
from rich.console import Console
from rich.logging import RichHandler

from .config import MonitoringConfig


def setup_logging(
    monitoring: Optional[MonitoringConfig] = None,
    cli_mode: bool = False
) -> None:
    """Set up structured logging.

    Structured mode renders JSON lines on stdout; otherwise events go through
    a rich console handler on stderr. CLI mode only shows warnings and above.
    """
    monitoring = monitoring or MonitoringConfig()

    if cli_mode:
        processors = [
            structlog.stdlib.filter_by_level,
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ]
    else:
        processors = [
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if monitoring.structured_logging
            else structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    log_level = logging.WARNING if cli_mode else getattr(logging, monitoring.log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    if monitoring.structured_logging and not cli_mode:
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=not cli_mode,
            show_path=not cli_mode,
            markup=False,
            rich_tracebacks=True,
        )
    handler.setLevel(log_level)
    root_logger.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger("asyncpg").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
