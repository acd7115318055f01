"""Exceptions raised by envyml.

All exceptions include structured error information (code, message,
details) and can be serialized with ``to_dict()``.

Usage:
    from envyml.exceptions import EnvymlError, FormatError

    try:
        Envyml().load("env.yml")
    except FormatError as exc:
        print(exc.path, exc.lineno)
"""

from envyml.exceptions.base import (
    CacheError,
    CommandExecutionError,
    ConfigurationError,
    EnvymlError,
    FileAccessError,
    FormatError,
)

__all__ = [
    "EnvymlError",
    "FileAccessError",
    "FormatError",
    "CommandExecutionError",
    "CacheError",
    "ConfigurationError",
]
