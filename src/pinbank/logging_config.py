# PinBank - Small ledger engine for PIN-protected accounts
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Logging configuration for PinBank.

Library modules only declare ``logging.getLogger(__name__)``; the CLI calls
``setup_logging`` once to attach a console handler to the ``pinbank`` logger.
Log records never contain PINs, salts or digests.
"""

import logging
import sys

LOGGER_NAME = "pinbank"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(
    level: str = "WARNING", logger_name: str = LOGGER_NAME
) -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        logger_name: Name of the logger to configure.

    Returns:
        The configured logger.

    Raises:
        ValueError: if ``level`` is not a known level name.
    """
    level_name = level.upper()
    if level_name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}.")

    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level_name))
    logger.propagate = False

    return logger
