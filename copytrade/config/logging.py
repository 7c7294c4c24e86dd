"""Structured Logging Configuration.

Production-ready logging with:
- JSON format for production (easy parsing by log aggregators)
- Human-readable format for development
- Event correlation (provider trade id, celery task id)
- Sensitive data filtering (exchange credentials never reach the logs)

Usage:
    from copytrade.config.logging import setup_logging

    setup_logging()  # Call once at worker startup
    logger = logging.getLogger(__name__)
    logger.info("copy_trade.open.start", extra={"provider_trade_id": "t-1"})
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog
from structlog.typing import EventDict

from copytrade import __version__
from copytrade.config.settings import Settings, get_settings


# ============================================================================
# SENSITIVE DATA FILTER
# ============================================================================

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = frozenset({
    "password",
    "secret",
    "api_key",
    "api_secret",
    "api_passphrase",
    "passphrase",
    "encryption_key",
    "token",
    "authorization",
    "private_key",
    "plaintext",
})

# Wallet ciphertext columns (api_key_encrypted, ...)
SENSITIVE_SUFFIX = "_encrypted"


def _is_sensitive(key: Any) -> bool:
    if not isinstance(key, str):
        return False
    key = key.lower()
    return key in SENSITIVE_KEYS or key.endswith(SENSITIVE_SUFFIX)


def _redact(value: Any) -> Any:
    """Redact nested mappings and sequences (ccxt params, headers)."""
    if isinstance(value, dict):
        return {k: REDACTED if _is_sensitive(k) else _redact(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_redact(item) for item in value)
    return value


def filter_sensitive_data(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """structlog processor: exchange credentials ніколи не потрапляють в логи.

    Values of sensitive keys (на будь-якій глибині) замінюються на '[REDACTED]'.
    """
    for key, value in list(event_dict.items()):
        event_dict[key] = REDACTED if _is_sensitive(key) else _redact(value)
    return event_dict


# ============================================================================
# CUSTOM PROCESSORS
# ============================================================================


def add_timestamp(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add ISO format timestamp to log events."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def service_context(settings: Settings) -> structlog.types.Processor:
    """Processor, що додає service / environment / version до кожного event."""
    context = {
        "service": "copytrade-engine",
        "environment": settings.environment,
        "version": __version__,
    }

    def add_service_context(
        logger: logging.Logger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        for key, value in context.items():
            event_dict.setdefault(key, value)
        return event_dict

    return add_service_context



# ============================================================================
# LOGGING SETUP
# ============================================================================


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structured logging for the process.

    Call this once at startup (celery worker_process_init or CLI entry).

    Configuration based on settings.log_format:
    - console: Console output with colors
    - json: JSON output for log aggregation
    """
    settings = settings or get_settings()

    # Common processors for all environments.
    # ExtraAdder lifts stdlib `extra={...}` fields into the event dict.
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_timestamp,
        service_context(settings),
        filter_sensitive_data,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        formatter = structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
            foreign_pre_chain=shared_processors,
        )
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)
        formatter = structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
            foreign_pre_chain=shared_processors,
        )

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, settings.log_level))

    # Reduce noise from third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.DEBUG if settings.db_echo else logging.WARNING
    )
    logging.getLogger("ccxt").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("celery").setLevel(logging.INFO)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Configured structlog logger.
    """
    return structlog.get_logger(name)


# ============================================================================
# EVENT CONTEXT (for correlation across one provider event)
# ============================================================================


def bind_event_context(
    provider_trade_id: str,
    event_type: str,
    task_id: str | None = None,
    **extra: Any,
) -> None:
    """Bind provider-event context to all subsequent log calls.

    Call this at the start of every lifecycle task, so every follower
    log line of the same fan-out carries the same trade id.

    Args:
        provider_trade_id: ID of the provider trade being mirrored.
        event_type: "trade_opened" or "trade_closed".
        task_id: Celery task id, if running inside a worker.
        **extra: Additional context to bind.
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        provider_trade_id=provider_trade_id,
        event_type=event_type,
        task_id=task_id,
        **extra,
    )


def clear_event_context() -> None:
    """Clear event context (call when the task finishes)."""
    structlog.contextvars.clear_contextvars()
