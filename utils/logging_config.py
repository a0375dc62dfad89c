"""Logging configuration helpers for the portal backend."""

from __future__ import annotations

import logging


def configure_logging(app) -> logging.Logger:
    """Configure root logging from the app's LOG_LEVEL and return the app logger."""
    level = getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    app.logger.setLevel(level)
    return app.logger
