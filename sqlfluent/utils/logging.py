"""Logging for SQLFluent.

Every logger handed out by :func:`get_logger` lives under the ``sqlfluent``
namespace and stamps records with the current correlation ID, so one bulk
registry load or one request's statements can be followed through the log.
:func:`correlation_context` scopes an ID to a block; the registry opens one
around every bulk load.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

from sqlfluent._serialization import encode_json

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from logging import LogRecord
    from typing import TextIO

__all__ = (
    "CorrelationIDFilter",
    "StructuredFormatter",
    "configure_logging",
    "correlation_context",
    "correlation_id_var",
    "get_correlation_id",
    "get_logger",
    "set_correlation_id",
)

ROOT_LOGGER_NAME = "sqlfluent"
NO_CORRELATION_ID = "-"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(correlation_id)s] %(message)s"

correlation_id_var: ContextVar[str | None] = ContextVar("sqlfluent_correlation_id", default=None)


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation ID for the current context, or clear it with ``None``."""
    correlation_id_var.set(correlation_id)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    """Run a block under one correlation ID.

    An ID already set by the caller is kept, so nested scopes share the
    outer ID. Otherwise a new one is generated. The previous value is
    restored on exit.

    Args:
        correlation_id: ID to use instead of the inherited or generated one.

    Yields:
        The correlation ID in effect inside the block.
    """
    effective = correlation_id or get_correlation_id() or uuid.uuid4().hex
    token = correlation_id_var.set(effective)
    try:
        yield effective
    finally:
        correlation_id_var.reset(token)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record.

    ``extra_fields`` passed through ``extra=`` are merged into the top level,
    which is how statement and registry log points attach counts and timings.
    """

    def format(self, record: LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}:{record.lineno}",
        }

        correlation_id = getattr(record, "correlation_id", NO_CORRELATION_ID)
        if correlation_id == NO_CORRELATION_ID:
            correlation_id = get_correlation_id()
        if correlation_id:
            log_entry["correlation_id"] = correlation_id

        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)  # pyright: ignore

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return encode_json(log_entry)  # type: ignore[return-value]


class CorrelationIDFilter(logging.Filter):
    """Copies the current correlation ID onto each record as ``correlation_id``.

    Records outside any correlation scope get :data:`NO_CORRELATION_ID`, so
    text formats that reference the field never fail.
    """

    def filter(self, record: LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID  # type: ignore[attr-defined]
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``sqlfluent`` namespace.

    Args:
        name: Dotted name relative to ``sqlfluent``; the root logger when omitted.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)

    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIDFilter) for f in logger.filters):
        logger.addFilter(CorrelationIDFilter())

    return logger


def configure_logging(
    level: str | int = "INFO",
    *,
    structured: bool = True,
    stream: TextIO | None = None,
    handlers: Sequence[logging.Handler] = (),
) -> logging.Logger:
    """Send SQLFluent's log output to a stream.

    Replaces any handlers on the ``sqlfluent`` root logger and stops
    propagation to the application's root logger.

    Args:
        level: Level name or number.
        structured: JSON records when true, :data:`TEXT_FORMAT` otherwise.
        stream: Output stream; ``sys.stderr`` by default.
        handlers: Further handlers, used as given.

    Returns:
        The ``sqlfluent`` root logger.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)
    root_logger.handlers.clear()

    stream_handler = logging.StreamHandler(sys.stderr if stream is None else stream)
    stream_handler.setFormatter(StructuredFormatter() if structured else logging.Formatter(TEXT_FORMAT))
    # records propagated from child loggers skip the root logger's own filters
    stream_handler.addFilter(CorrelationIDFilter())
    root_logger.addHandler(stream_handler)
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.propagate = False

    root_logger.debug(
        "SQLFluent logging configured",
        extra={"extra_fields": {"structured": structured, "handlers_count": len(root_logger.handlers)}},
    )
    return root_logger
