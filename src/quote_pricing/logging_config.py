"""Logging configuration for the quote pricing tool.

Usage:
    from quote_pricing.logging_config import get_logger
    logger = get_logger(__name__)

Environment variables:
    QUOTE_PRICING_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR. Default: INFO
"""
import logging
import os
import sys

DEFAULT_LOG_LEVEL = logging.INFO

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_logging_configured = False


def configure_logging(level: int | str | None = None) -> None:
    """Configure the package logger once.

    Args:
        level: Log level (int or name). If None, reads QUOTE_PRICING_LOG_LEVEL
               or uses DEFAULT_LOG_LEVEL.
    """
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = os.environ.get("QUOTE_PRICING_LOG_LEVEL", "")
    if isinstance(level, str):
        level = LEVELS.get(level.upper(), DEFAULT_LOG_LEVEL)

    log_format = LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(log_format))

    package_logger = logging.getLogger("quote_pricing")
    package_logger.setLevel(level)
    package_logger.addHandler(handler)
    package_logger.propagate = False

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace."""
    return logging.getLogger(name)
