"""Logging configuration for the records service."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a console handler to the ``unirecords`` logger.

    Calling it again replaces the handler instead of stacking a new one, so
    the app factory can run several times in one process (tests do).
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("unirecords")
    logger.setLevel(log_level)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    logger.debug("Logging initialized (level=%s)", level)
    return logger


def mask_mongo_uri(uri: str) -> str:
    """Hide the credentials part of a MongoDB URI before it is logged."""

    if "://" not in uri or "@" not in uri:
        return uri
    scheme, rest = uri.split("://", 1)
    credentials, host = rest.rsplit("@", 1)
    if not credentials:
        return uri
    return f"{scheme}://***:***@{host}"


__all__ = ["setup_logging", "mask_mongo_uri", "LOG_FORMAT"]
