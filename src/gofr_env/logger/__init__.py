"""
gofr-env logger module.

Usage:
    from gofr_env.logger import get_logger, create_logger

    logger = get_logger("gofr-env")
    logger.info("Environment loaded", environment="prod", variables=42)

Environment Variables:
    {PREFIX}_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    {PREFIX}_LOG_FILE: Optional file path for log output
    {PREFIX}_LOG_JSON: Set to "true" for JSON output format

    Where {PREFIX} is derived from the logger name: "gofr-env" -> "GOFR_ENV",
    "gofr-env-parser" -> "GOFR_ENV_PARSER".
"""

import logging
import os
from typing import Optional

from .interface import Logger
from .structured_logger import JsonFormatter, StructuredLogger, TextFormatter


def _get_env_prefix(name: str) -> str:
    """Convert a logger name to its environment variable prefix."""
    return name.upper().replace("-", "_")


def create_logger(
    name: str = "gofr-env",
    level: Optional[int] = None,
    log_file: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> Logger:
    """Create a logger, reading unset options from the environment.

    Args:
        name: Logger name (e.g., "gofr-env-reader")
        level: Logging level (defaults to {PREFIX}_LOG_LEVEL or WARNING)
        log_file: Optional file path for log output
        json_format: If True, output logs as JSON

    Returns:
        A configured Logger instance
    """
    env_prefix = _get_env_prefix(name)

    if level is None:
        # Library components stay quiet unless asked
        level_str = os.environ.get(f"{env_prefix}_LOG_LEVEL", "WARNING").upper()
        level = getattr(logging, level_str, logging.WARNING)

    if log_file is None:
        log_file = os.environ.get(f"{env_prefix}_LOG_FILE")

    if json_format is None:
        json_format = os.environ.get(f"{env_prefix}_LOG_JSON", "false").lower() == "true"

    return StructuredLogger(
        name=name,
        level=level,
        log_file=log_file,
        json_format=json_format,
    )


def get_logger(name: str = "gofr-env") -> Logger:
    """Get a logger configured purely from environment variables."""
    return create_logger(name=name)


__all__ = [
    "Logger",
    "StructuredLogger",
    "JsonFormatter",
    "TextFormatter",
    "create_logger",
    "get_logger",
]
