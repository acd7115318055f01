"""
envyml logger module

Usage:
    from envyml.logger import get_logger

    logger = get_logger("envyml.cache")
    logger.debug("Cache miss", key=key)

Environment Variables:
    {PREFIX}_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    {PREFIX}_LOG_FILE: Optional file path for log output
    {PREFIX}_LOG_JSON: Set to "true" for JSON output format

    Where {PREFIX} is the first dotted component of the logger name,
    upper-cased ("envyml.cache" -> "ENVYML").
"""

import logging
import os
from typing import Optional

from .interface import Logger
from .structured_logger import JsonFormatter, StructuredLogger, TextFormatter

DEFAULT_LEVEL = logging.WARNING


def _get_env_prefix(name: str) -> str:
    """Derive the environment prefix from a logger name.

    Examples:
        "envyml" -> "ENVYML"
        "envyml.cache" -> "ENVYML"
        "my-app" -> "MY_APP"
    """
    return name.split(".", 1)[0].upper().replace("-", "_")


def _level_from_env(prefix: str) -> int:
    level = logging.getLevelName(os.environ.get(f"{prefix}_LOG_LEVEL", "").strip().upper())
    return level if isinstance(level, int) else DEFAULT_LEVEL


def create_logger(
    name: str = "envyml",
    level: Optional[int] = None,
    log_file: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> Logger:
    """Create a logger; options left as None are read from the environment.

    Unknown level names fall back to WARNING.
    """
    prefix = _get_env_prefix(name)
    env = os.environ

    return StructuredLogger(
        name=name,
        level=_level_from_env(prefix) if level is None else level,
        log_file=env.get(f"{prefix}_LOG_FILE") if log_file is None else log_file,
        json_format=(
            env.get(f"{prefix}_LOG_JSON", "").lower() == "true" if json_format is None else json_format
        ),
    )


def get_logger(name: str = "envyml") -> Logger:
    """Logger configured from environment variables only."""
    return create_logger(name)


__all__ = [
    "Logger",
    "StructuredLogger",
    "JsonFormatter",
    "TextFormatter",
    "create_logger",
    "get_logger",
    "DEFAULT_LEVEL",
]
