"""
Structured logging for logical calls.

bornite never configures handlers. It asks a logger factory for a
``logging.LoggerAdapter`` and emits dotted event names as messages with the
call's fields in ``extra``:

    request.started     INFO   method, url
    request.redirect    DEBUG  from_url, to_url, status_code, redirect_count, next_method
    content.decompress  DEBUG  content_type, size_bytes, compression
    content.parse       DEBUG  content_type, size_bytes, payload_type
    request.completed   INFO   method, url, status_code, redirect_count, duration_ms
    request.failed      ERROR  error_type, error_message, redirect_count, duration_ms

Embedding applications route these through their own structured logger:

    from bornite.observability.logging import configure_logging

    configure_logging(lambda name, **context: my_structlog_adapter(name, **context))
"""

from __future__ import annotations

import logging
from logging import LoggerAdapter
from typing import Any, Callable, Dict, Optional

LoggerFactory = Callable[..., LoggerAdapter]

# Injected by configure_logging; None means stdlib logging.
_logger_factory: Optional[LoggerFactory] = None


class BorniteLoggerAdapter:
    """Event-oriented facade over a LoggerAdapter with bound context."""

    def __init__(self, logger: LoggerAdapter, context: Optional[Dict[str, Any]] = None):
        self._logger = logger
        self._context = dict(context or {})

    @property
    def context(self) -> Dict[str, Any]:
        return dict(self._context)

    def bind(self, **context: Any) -> "BorniteLoggerAdapter":
        """Return an adapter sharing the backend with ``context`` added."""
        return BorniteLoggerAdapter(self._logger, {**self._context, **context})

    def _emit(self, level: int, event: str, exc_info: Optional[BaseException] = None, **fields: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, event, extra={**self._context, **fields}, exc_info=exc_info)

    def debug(self, event: str, **fields: Any) -> None:
        self._emit(logging.DEBUG, event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self._emit(logging.INFO, event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._emit(logging.WARNING, event, **fields)

    def error(self, event: str, exc_info: Optional[BaseException] = None, **fields: Any) -> None:
        self._emit(logging.ERROR, event, exc_info=exc_info, **fields)


class _FieldsAdapter(logging.LoggerAdapter):
    """Stdlib adapter that keeps per-event fields as LogRecord attributes."""

    def process(self, msg: Any, kwargs: Any) -> Any:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def _stdlib_factory(name: str, **context: Any) -> LoggerAdapter:
    return _FieldsAdapter(logging.getLogger(name), context)


def configure_logging(logger_factory: Optional[LoggerFactory]) -> None:
    """
    Install the factory used by every logger created afterwards.

    Args:
        logger_factory: ``(name, **context) -> LoggerAdapter``, or None to go
            back to stdlib logging
    """
    global _logger_factory
    _logger_factory = logger_factory


def get_bornite_logger(
    name: str,
    url: Optional[str] = None,
    method: Optional[str] = None,
    **context: Any
) -> BorniteLoggerAdapter:
    """
    Build a logger for ``name`` with ``url``/``method`` bound when given.

    Clients without an injected logger call this for every logical call, so
    a factory installed with configure_logging applies from the next call on.
    """
    bound = dict(context)
    if url is not None:
        bound["url"] = url
    if method is not None:
        bound["method"] = method

    factory = _logger_factory or _stdlib_factory
    return BorniteLoggerAdapter(factory(name, **bound), bound)


def log_exception(
    logger: BorniteLoggerAdapter,
    exc: BaseException,
    event: str,
    **fields: Any
) -> None:
    """Log ``exc`` under ``event`` with its type and rendered message."""
    logger.error(
        event,
        exc_info=exc,
        error_type=type(exc).__name__,
        error_message=str(exc),
        **fields
    )


def log_redirect(
    logger: BorniteLoggerAdapter,
    from_url: str,
    to_url: str,
    status_code: int,
    redirect_count: int,
    **fields: Any
) -> None:
    """Log one followed redirect hop."""
    logger.debug(
        "request.redirect",
        from_url=from_url,
        to_url=to_url,
        status_code=status_code,
        redirect_count=redirect_count,
        **fields
    )


def log_content_processing(
    logger: BorniteLoggerAdapter,
    operation: str,
    content_type: Optional[str] = None,
    size_bytes: Optional[int] = None,
    **fields: Any
) -> None:
    """Log a body processing step as ``content.<operation>``."""
    logger.debug(
        f"content.{operation}",
        content_type=content_type,
        size_bytes=size_bytes,
        **fields
    )
