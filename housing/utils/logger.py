"""Process-wide logging with the active tenant namespace on every line."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from housing.utils.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | tenant=%(namespace)s | %(message)s"
NO_TENANT = "-"

_current_namespace: ContextVar[str] = ContextVar("housing_namespace", default=NO_TENANT)
_LOGGER_INITIALIZED = False


class TenantNamespaceFilter(logging.Filter):
    """Stamps records with the namespace of the tenant operation in progress."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "namespace"):
            record.namespace = _current_namespace.get()
        return True


@contextmanager
def tenant_context(namespace: str) -> Iterator[None]:
    token = _current_namespace.set(namespace)
    try:
        yield
    finally:
        _current_namespace.reset(token)


def current_namespace() -> str:
    return _current_namespace.get()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging once.

    Leaves an already configured root logger alone, e.g. under a test runner
    or when uvicorn set it up first.
    """
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    resolved_level = (level or get_settings().log_level).upper()
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(TenantNamespaceFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=resolved_level, handlers=[handler])
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger for the requested module."""
    configure_logging()
    return logging.getLogger(name)
