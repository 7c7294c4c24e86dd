"""Application Configuration.

Uses pydantic-settings for type-safe configuration from environment variables.

Usage:
    from copytrade.config import get_settings, setup_logging
    settings = get_settings()
    setup_logging()  # Call once at startup
"""

from .settings import Settings, get_settings
from .logging import (
    bind_event_context,
    clear_event_context,
    get_logger,
    setup_logging,
)

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "get_logger",
    "bind_event_context",
    "clear_event_context",
]
