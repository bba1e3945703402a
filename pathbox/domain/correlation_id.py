"""Correlation IDs that tie confinement decisions back to the caller's work unit."""

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, MutableMapping, Optional

LOGGER_PREFIX = "pathbox."

_correlation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "pathbox_correlation_id", default=None
)


def generate_correlation_id() -> str:
    """Generate a new correlation ID using UUID4."""
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    """Return the correlation ID bound to the current context, if any."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Bind a correlation ID to the current context."""
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Unbind the correlation ID from the current context."""
    _correlation_id_var.set(None)


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation ID for the duration of a block and restore the previous one.

    A fresh ID is generated when none is supplied. Nested scopes restore
    the outer ID on exit.
    """
    value = correlation_id or generate_correlation_id()
    token = _correlation_id_var.set(value)
    try:
        yield value
    finally:
        _correlation_id_var.reset(token)


class CorrelationLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that stamps correlation_id and component onto every record."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})

        correlation_id = get_correlation_id()
        extra["correlation_id"] = correlation_id if correlation_id is not None else "-"

        logger_name = self.logger.name
        if logger_name.startswith(LOGGER_PREFIX):
            extra["component"] = logger_name[len(LOGGER_PREFIX) :]
        else:
            extra["component"] = logger_name

        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(component: str) -> CorrelationLoggerAdapter:
    """Return the adapter for a ``pathbox.<component>`` child logger."""
    return CorrelationLoggerAdapter(logging.getLogger(LOGGER_PREFIX + component), {})
