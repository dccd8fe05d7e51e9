"""Core components for streammeta."""

from .config import StreamMetaConfig
from .logging import get_logger, setup_logging

__all__ = ["StreamMetaConfig", "get_logger", "setup_logging"]
