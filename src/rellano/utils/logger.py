"""Minimal logging utilities for rellano.

Provides a simple get_logger function that wraps the standard library logging.
The library never installs handlers; configure logging in the host application.

Example:
    >>> from rellano.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Restored scan state")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "rellano." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'rellano.mymodule'
    """
    if not (name == "rellano" or name.startswith("rellano.")):
        name = f"rellano.{name}"
    return logging.getLogger(name)
