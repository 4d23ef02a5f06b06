from __future__ import annotations

import json
import logging
import sys
from typing import Any

from franceconnect.core.config import settings

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

PACKAGE_LOGGER = "franceconnect"
_QUIET_LOGGERS = ("httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key.startswith("_") or key in payload or key in _RESERVED_ATTRS:
                continue
            payload.setdefault("extra", {})[key] = value
        return json.dumps(payload, default=str)


def _level(name: str | None, default: int) -> int:
    if not name:
        return default
    return getattr(logging, name.upper(), default)


def configure_package_loggers(level: int | None = None) -> None:
    """Set the franceconnect logger level and quiet the HTTP client libraries.

    httpx logs every request line (URL included) at INFO; provider URLs carry
    authorization codes, so the client loggers stay at WARNING.
    """
    package_level = level or _level(settings.FRANCECONNECT_LOG_LEVEL, _level(settings.LOG_LEVEL, logging.INFO))
    logging.getLogger(PACKAGE_LOGGER).setLevel(package_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def init_logging(level: int | None = None) -> None:
    configure_package_loggers(level)
    if logging.getLogger().handlers:
        return
    effective_level = _level(settings.LOG_LEVEL, logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_FORMAT.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        handler.setFormatter(logging.Formatter(fmt))
    root = logging.getLogger()
    root.setLevel(effective_level)
    root.addHandler(handler)
