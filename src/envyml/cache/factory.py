"""Factory for cache stores."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional, Union

from envyml.exceptions import ConfigurationError
from envyml.logger import Logger

from .base import CacheStore
from .file import FileCacheStore
from .memory import MemoryCacheStore

BackendType = Literal["memory", "file"]


def create_cache_store(
    backend: BackendType,
    *,
    directory: Optional[Union[str, Path]] = None,
    logger: Optional[Logger] = None,
) -> CacheStore:
    """Create a cache store based on backend type.

    Args:
        backend: "memory" or "file"
        directory: Cache directory (required for "file")
        logger: Optional logger instance

    Raises:
        ConfigurationError: If the backend is unknown or options are missing

    Example:
        store = create_cache_store("file", directory="/var/cache/envyml")
    """
    if backend == "memory":
        return MemoryCacheStore()

    elif backend == "file":
        if directory is None:
            raise ConfigurationError("'directory' is required for the file cache backend")
        return FileCacheStore(directory, logger=logger)

    else:
        raise ConfigurationError(
            f"Unknown cache backend: {backend}",
            {"allowed": ["memory", "file"]},
        )
