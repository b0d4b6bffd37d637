"""Logging setup for the API process."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the ``kalender`` logger tree.

    Safe to call repeatedly; later calls only adjust the level.
    """
    logger = logging.getLogger("kalender")
    logger.setLevel(level.upper())
    if not any(getattr(h, "_kalender", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._kalender = True
        logger.addHandler(handler)
