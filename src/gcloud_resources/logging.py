"""Structured logging for gcloud_resources using structlog.

The library only emits events through ``get_logger``; applications that want
the library's output rendered opt in by calling ``configure_logging``.
"""

import logging
import sys
from typing import TYPE_CHECKING, TextIO

import structlog

if TYPE_CHECKING:
    from gcloud_resources.config import Settings

# Subpackages whose loggers are tagged with the service they call
SERVICES = ("bigquery", "storage")


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging for an application using the library.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        log_format: Output format ('json' for production, 'text' for development).
        stream: Output stream (defaults to stdout).
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format.lower() == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Transport libraries log every request at DEBUG
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("google.auth").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def configure_from_settings(settings: "Settings") -> None:
    """Configure logging from the LOG_LEVEL / LOG_FORMAT settings."""
    configure_logging(settings.log_level, settings.log_format)


def service_for(name: str | None) -> str | None:
    """Return the API service ("bigquery" or "storage") a module name belongs to."""
    parts = (name or "").split(".")
    if len(parts) > 1 and parts[0] == "gcloud_resources" and parts[1] in SERVICES:
        return parts[1]
    return None


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Loggers of the service subpackages carry a bound ``service`` field so
    events from both APIs can be told apart in one stream.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Configured structlog BoundLogger.
    """
    service = service_for(name)
    # Initial values keep the logger lazy until configure_logging has run
    context = {"service": service} if service is not None else {}
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name, **context)
    return logger
