"""Logging setup for the hall service.

Every record goes to stderr as one JSON object. Two environment knobs:

- LOG_LEVEL (default: INFO) root logger level
- DISABLE_ACCESS_LOG quiets uvicorn's per-request access lines; defaults to
  on when LOG_LEVEL is WARNING or higher
"""

from __future__ import annotations

import logging
import os

from pythonjsonlogger import jsonlogger

from .config import settings

JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _truthy(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _resolve_level() -> int:
    name = (os.getenv("LOG_LEVEL") or settings.LOG_LEVEL or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def setup_logging() -> None:
    """Install the JSON handler on the root logger and tune library loggers."""
    handler = logging.StreamHandler()
    handler.setFormatter(
        jsonlogger.JsonFormatter(JSON_FORMAT, rename_fields={"asctime": "ts", "levelname": "level"})
    )
    root = logging.getLogger()
    root.handlers = [handler]
    level = _resolve_level()
    root.setLevel(level)

    # SQL statements only at DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level <= logging.DEBUG else logging.WARNING
    )

    access = logging.getLogger("uvicorn.access")
    if _truthy(os.getenv("DISABLE_ACCESS_LOG"), level >= logging.WARNING):
        access.handlers = []
        access.propagate = False
        access.disabled = True
    else:
        access.setLevel(level)
