"""Logging setup for the security.txt MCP server.

Records go to stderr, because stdout carries the MCP protocol. Each tool
call gets a short request id, held in a context variable so that
overlapping calls (and the worker threads started for them with
``asyncio.to_thread``) each see their own id.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

PACKAGE_LOGGER = "solana_sectxt_mcp"
SERVICE_NAME = "solana-sectxt-mcp"

# Attributes every LogRecord has; anything else came in through extra={...}
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}

_request_id: ContextVar[str | None] = ContextVar("sectxt_request_id", default=None)


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class StructuredFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def __init__(self, service_name: str = SERVICE_NAME) -> None:
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        if record.levelno >= logging.WARNING:
            entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, _tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc) if exc is not None else None,
            }

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            entry[key] = _jsonable(value)

        return json.dumps(entry, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp the current call's request id onto records that pass through."""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = _request_id.get()
        if request_id is not None:
            record.request_id = request_id
        return True


def set_request_id(request_id: str | None = None) -> str:
    """Start a request scope in the current context and return its id."""
    if request_id is None:
        request_id = uuid.uuid4().hex[:8]
    _request_id.set(request_id)
    return request_id


def get_request_id() -> str | None:
    return _request_id.get()


def clear_request_id() -> None:
    _request_id.set(None)


def _env_level(default: int) -> int:
    name = os.environ.get("SECTXT_LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def setup_logging(
    service_name: str = SERVICE_NAME,
    *,
    level: int | None = None,
    json_format: bool | None = None,
) -> None:
    """Install a single stderr handler on the package logger.

    Args:
        service_name: Value of the ``service`` field in JSON records.
        level: Log level; SECTXT_LOG_LEVEL or INFO when None.
        json_format: JSON output; False when SECTXT_LOG_FORMAT=text.
    """
    if level is None:
        level = _env_level(logging.INFO)
    if json_format is None:
        json_format = os.environ.get("SECTXT_LOG_FORMAT", "json").strip().lower() != "text"

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    if json_format:
        handler.setFormatter(StructuredFormatter(service_name))
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Child of the package logger, e.g. ``get_logger("client")``."""
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
