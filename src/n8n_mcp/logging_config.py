"""Logging setup for the n8n MCP server."""

from __future__ import annotations

import logging

LOGGER_NAME = "n8n_mcp"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a stream handler to the package logger.

    Calling this more than once only updates the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    logger.setLevel(resolved if isinstance(resolved, int) else logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    return logger
