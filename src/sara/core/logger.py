"""Logging configuration for Sara."""

from __future__ import annotations

import logging

from .config_loader import get_logging_config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "sara"


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once for the application."""
    resolved = (level or get_logging_config()["level"]).upper()
    logging.basicConfig(level=getattr(logging, resolved, logging.INFO), format=LOG_FORMAT)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the `sara` namespace."""
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
