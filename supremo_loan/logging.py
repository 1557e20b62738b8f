"""Logging helpers for the ``supremo_loan`` logger tree.

The library only ever attaches a ``NullHandler``; the host application owns
the root logger. :func:`enable_logging` is an opt-in for scripts that want the
client's request log on stdout without configuring logging themselves.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

__all__ = ["LOGGER_NAME", "JsonFormatter", "ServiceFilter", "enable_logging"]

LOGGER_NAME = "supremo_loan"

# Request context attached via ``extra=`` by http/auth/registry.
_CONTEXT_KEYS = ("service", "client", "endpoint", "method", "status")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, carrying the request context when set."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, getattr(record, key))
            for key in _CONTEXT_KEYS
            if getattr(record, key, None) is not None
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"), default=str)


class ServiceFilter(logging.Filter):
    """Stamp every record with a ``service`` label."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        return True


class _ClientHandler(logging.StreamHandler):
    """Marker type so repeated :func:`enable_logging` calls replace, not stack."""


def enable_logging(
    fmt: str | None = None,
    *,
    level: str | int | None = None,
    service_name: str | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Send ``supremo_loan`` records to *stream* (stdout by default).

    Args:
        fmt: 'json' or 'text'. Defaults to LOG_FORMAT env or 'text'.
        level: logger level. Defaults to LOG_LEVEL env or 'INFO'.
        service_name: optional service label stamped on every record.

    Records stop propagating to the root logger so they are not printed twice.
    """

    fmt = (fmt or os.getenv("LOG_FORMAT", "text")).lower()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level or os.getenv("LOG_LEVEL", "INFO").upper())

    for h in list(logger.handlers):
        if isinstance(h, _ClientHandler):
            logger.removeHandler(h)

    handler = _ClientHandler(stream or sys.stdout)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
        )
    if service_name:
        handler.addFilter(ServiceFilter(service_name))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
