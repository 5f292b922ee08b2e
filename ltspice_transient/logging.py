"""Logging configuration for ltspice_transient.

Default is quiet: WARNING level only, which is where every recoverable parse
warning (variable count mismatch, stepped simulation) is reported.

Usage:
    from ltspice_transient.logging import logger, enable_debug_logging

    enable_debug_logging()   # trace header length, layout and read attempts
"""

import logging
import sys

logger = logging.getLogger("ltspice_transient")

logger.setLevel(logging.WARNING)

if not logger.handlers:
    _default_handler = logging.StreamHandler(sys.stdout)
    _default_handler.setLevel(logging.WARNING)
    _default_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(_default_handler)


def enable_debug_logging() -> None:
    """Switch the package logger (and its handlers) to DEBUG."""
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers:
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))


def disable_debug_logging() -> None:
    """Return to the default WARNING-only configuration."""
    logger.setLevel(logging.WARNING)
    for handler in logger.handlers:
        handler.setLevel(logging.WARNING)
        handler.setFormatter(logging.Formatter("%(message)s"))
