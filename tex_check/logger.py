"""Minimal logging utilities for tex-check.

Example:
    >>> from tex_check.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("push Brace() at line 3")
"""

from __future__ import annotations

import logging

ROOT_LOGGER_NAME = "tex_check"
TRACE_FORMAT = "%(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger namespaced under ``tex_check``.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> get_logger("lexer").name
        'tex_check.lexer'
    """
    if not (name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}.")):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def enable_trace(stream=None) -> logging.Handler:
    """Send DEBUG records of the package to `stream` (stderr by default).

    Returns the installed handler so callers can remove it again.
    """
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(TRACE_FORMAT))
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    return handler


def disable_trace(handler: logging.Handler) -> None:
    """Undo `enable_trace`."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
