"""Lightweight logging helpers with UTC timestamps."""

from __future__ import annotations

import logging
import os
import time
from typing import IO, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
_HANDLER_NAME = "exit-engine-root-handler"


def _resolve_level(level: str | int | None) -> int:
    if level is None:
        env_level = os.getenv("LOG_LEVEL", "INFO").upper()
        return getattr(logging, env_level, logging.INFO)
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return int(level)


def _find_handler(root: logging.Logger) -> Optional[logging.Handler]:
    for handler in root.handlers:
        if getattr(handler, "name", "") == _HANDLER_NAME:
            return handler
    return None


def setup_logging(level: str | int | None = None, stream: Optional[IO[str]] = None) -> logging.Logger:
    """Configure a single root handler if one has not been attached.

    Passing ``stream`` replaces the shared handler's stream, which lets a
    caller capture engine decisions in-process.
    """
    root = logging.getLogger()
    resolved_level = _resolve_level(level)

    handler = _find_handler(root)
    if handler is None:
        handler = logging.StreamHandler(stream)
        handler.name = _HANDLER_NAME
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        formatter.converter = time.gmtime  # Force UTC timestamps
        handler.setFormatter(formatter)
        root.addHandler(handler)
    elif stream is not None and isinstance(handler, logging.StreamHandler):
        handler.setStream(stream)

    root.setLevel(resolved_level)
    handler.setLevel(resolved_level)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger configured with the shared format."""
    setup_logging()
    return logging.getLogger(name)
