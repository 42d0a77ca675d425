"""
Structured logging configuration using structlog.

Provides consistent JSON logging for production and pretty console output for development.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from src.core.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        settings: Application settings. If None, uses default settings.
    """
    if settings is None:
        settings = get_settings()

    # Set log level
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Common processors for both dev and prod
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        # Production: JSON format
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # Development: Pretty console output
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # Set levels for noisy libraries
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("aiobotocore").setLevel(logging.WARNING)
    logging.getLogger("azure").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name. If None, uses the caller's module name.

    Returns:
        A bound structlog logger.
    """
    return structlog.get_logger(name)


class RequestLogger:
    """Logger for HTTP request/response logging."""

    def __init__(self) -> None:
        self.logger = get_logger("http")

    def log_request(
        self,
        method: str,
        path: str,
        client_ip: str | None = None,
    ) -> None:
        """Log incoming HTTP request."""
        self.logger.debug(
            "request_received",
            method=method,
            path=path,
            client_ip=client_ip,
        )

    def log_response(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        """Log HTTP response."""
        log_method = self.logger.info if status_code < 400 else self.logger.warning
        log_method(
            "request_completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=round(duration_ms, 2),
        )


class StorageLogger:
    """Logger for blob storage operations."""

    def __init__(self, backend: str) -> None:
        self.backend = backend
        self.logger = get_logger("storage")

    def log_uploaded(self, key: str, size: int, content_type: str) -> None:
        """Log a successful upload."""
        self.logger.info(
            "blob_uploaded",
            backend=self.backend,
            key=key,
            size=size,
            content_type=content_type,
        )

    def log_deleted(self, key: str, existed: bool) -> None:
        """Log a delete call, including deletes of already-missing blobs."""
        self.logger.info(
            "blob_deleted",
            backend=self.backend,
            key=key,
            existed=existed,
        )

    def log_failed(self, operation: str, key: str, error: str) -> None:
        """Log a failed storage operation with its context."""
        self.logger.error(
            "storage_operation_failed",
            operation=operation,
            backend=self.backend,
            key=key,
            error=error,
        )
