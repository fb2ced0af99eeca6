"""Logging setup shared by the event handler and the backfill."""

import os
import sys
import time
import logging
from typing import Optional

DEFAULT_LOGGER_NAME = "thumbnail-pipeline"

STRUCTURED_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)-8s | "
    "%(threadName)s | %(funcName)s() | %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ISO_UTC_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"

# Loggers of the AWS SDK and Pillow, kept at LOG_LEVEL_LIBRARIES
LIBRARY_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3", "PIL")


def _resolve_level(level: Optional[str], env_var: str = "LOG_LEVEL") -> int:
    name = (level or os.getenv(env_var, "INFO")).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def _build_formatter(format_type: str) -> logging.Formatter:
    if format_type == "structured":
        formatter = logging.Formatter(STRUCTURED_FORMAT, datefmt=ISO_UTC_DATEFMT)
        formatter.converter = time.gmtime
        return formatter
    return logging.Formatter(SIMPLE_FORMAT)


def quiet_library_loggers(level: Optional[str] = None) -> None:
    """Raise the threshold of chatty third-party loggers (default WARNING)."""
    resolved = _resolve_level(level or os.getenv("LOG_LEVEL_LIBRARIES", "WARNING"))
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(resolved)


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure a pipeline logger writing to stdout.

    Args:
        name: Logger name (defaults to "thumbnail-pipeline")
        level: Level override; otherwise LOG_LEVEL, then INFO
        format_type: "structured" or "simple"; LOG_FORMAT takes precedence

    Returns:
        Configured logger instance

    Environment Variables:
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
        LOG_FORMAT: "structured" or "simple"
        LOG_LEVEL_LIBRARIES: Level for boto3, botocore and Pillow loggers
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    # One handler per logger, however often it is requested
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            _build_formatter(os.getenv("LOG_FORMAT", format_type).lower())
        )
        logger.addHandler(handler)
        quiet_library_loggers()

    logger.propagate = False
    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    return setup_logger(name)
