"""structlog setup for SecretSanta.

Log lines are rendered for humans in development and as JSON everywhere else.
Context bound through ``structlog.contextvars`` (the request correlation id,
the group being closed, ...) is merged into every entry.
"""

import logging
import sys
import uuid
from types import TracebackType
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from secretsanta.core.config import Settings, get_settings

DEFAULT_LOGGER_NAME = "secretsanta"

# Loggers of libraries that log through the stdlib
THIRD_PARTY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "sqlalchemy.engine")


def new_correlation_id() -> str:
    """Generate a short correlation ID."""
    return f"cid_{uuid.uuid4().hex[:12]}"


def add_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Make sure every entry carries a correlation ID.

    Entries emitted inside a request already have the one bound by the HTTP
    middleware; anything else gets a fresh one.
    """
    event_dict.setdefault("correlation_id", new_correlation_id())
    return event_dict


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["logger"] = getattr(logger, "name", DEFAULT_LOGGER_NAME)
    return event_dict


def rename_message_field(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Store the log message under ``message`` instead of ``event``."""
    message = event_dict.pop("event", None)
    if message is not None:
        event_dict["message"] = message
    return event_dict


def _renderer(settings: Settings) -> Processor:
    if settings.is_development or settings.log_format == "console":
        return structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.processors.JSONRenderer()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib loggers used by our libraries.

    Args:
        settings: Settings to read level and format from; defaults to the
            cached application settings.
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_correlation_id,
        rename_message_field,
        _renderer(settings),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        # console output is re-read while developing, JSON loggers can be cached
        cache_logger_on_first_use=not settings.is_development and settings.log_format == "json",
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, named ``secretsanta`` unless told otherwise."""
    return structlog.get_logger(name or DEFAULT_LOGGER_NAME)


class LoggingContext:
    """Bind key/value pairs to every entry logged inside a ``with`` block.

    Example:
        with LoggingContext(group="xmas", actor="alice"):
            logger.info("Drawing santas")  # carries group and actor
    """

    def __init__(self, **values: Any) -> None:
        self.values = values
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "LoggingContext":
        self._tokens = structlog.contextvars.bind_contextvars(**self.values)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)


def bind_correlation_id(correlation_id: str) -> None:
    """Attach ``correlation_id`` to everything logged in the current context."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    """Drop all values bound to the current logging context."""
    structlog.contextvars.clear_contextvars()
