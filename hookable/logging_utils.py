"""Logging configuration helpers."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "WARNING") -> logging.Logger:
    normalized = level.upper()
    logger = logging.getLogger("hookable")
    logger.setLevel(getattr(logging, normalized, logging.WARNING))
    if not any(getattr(handler, "_hookable", False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._hookable = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
