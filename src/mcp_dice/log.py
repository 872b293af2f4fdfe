from __future__ import annotations

import logging
import sys


PACKAGE_LOGGER = "mcp_dice"

_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s"


def setup_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Send package logs to stderr; stdout is reserved for the stdio transport."""

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Prevent duplicate handlers on repeated calls.
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    return logger
