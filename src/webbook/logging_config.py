"""Logging setup shared by the CLI and library modules."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_ROOT_LOGGER = "webbook"


def configure_logging(*, quiet: bool = False, verbose: bool = False) -> logging.Logger:
    """Install a stderr handler on the package logger.

    Args:
        quiet: Only report warnings and errors (hides chapter progress).
        verbose: Include debug output such as retries and converter status.

    Returns:
        The configured package logger.
    """
    level = logging.INFO
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG

    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(level)
    if not any(handler.get_name() == _ROOT_LOGGER for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.set_name(_ROOT_LOGGER)
        logger.addHandler(handler)
    logger.propagate = False
    return logger
