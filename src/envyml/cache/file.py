"""File-based cache store.

One JSON file per entry, named after the SHA-1 of the cache key. The
directory can be shared by several processes: entries are written to a
temporary file in the same directory, fsynced, then renamed over the final
name, so a reader sees either no entry or a complete one.
"""

from __future__ import annotations

import hashlib
import json
import os
import stat
import tempfile
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from envyml.exceptions import CacheError
from envyml.logger import Logger, create_logger

from .base import FlatMapFactory

ENTRY_SUFFIX = ".json"


class FileCacheStore:
    """Persistent cache store in a directory.

    Entries read or written through this instance are also kept in memory,
    so repeated lookups of a key return the same mapping object.

    Example:
        store = FileCacheStore("/var/cache/envyml")
        values = store.get(key, lambda: flatten(tree))
    """

    def __init__(
        self,
        directory: Union[str, Path],
        logger: Optional[Logger] = None,
    ) -> None:
        self.directory = Path(directory)
        self.logger = logger or create_logger(name="envyml.cache")
        self._memo: Dict[str, Mapping[str, str]] = {}
        self._directory_ready = False

    def entry_path(self, key: str) -> Path:
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}{ENTRY_SUFFIX}"

    def get(self, key: str, compute: FlatMapFactory) -> Mapping[str, str]:
        memo = self._memo.get(key)
        if memo is not None:
            return memo

        self._prepare_directory()
        entry = self._read(key)
        if entry is not None:
            self.logger.debug("Cache hit", key=key)
        else:
            self.logger.debug("Cache miss", key=key)
            values = dict(compute())
            self._write(key, values)
            entry = MappingProxyType(values)

        self._memo[key] = entry
        return entry

    def exists(self, key: str) -> bool:
        return key in self._memo or self.entry_path(key).is_file()

    def clear(self) -> int:
        self._memo.clear()
        if not self.directory.is_dir():
            return 0

        count = 0
        for entry in self.directory.glob(f"*{ENTRY_SUFFIX}"):
            try:
                entry.unlink()
                count += 1
            except FileNotFoundError:
                # Removed concurrently by another process
                continue
            except OSError as exc:
                raise CacheError(f"Unable to remove cache entry {entry}", {"error": str(exc)}) from exc
        self.logger.info("Cache cleared", directory=str(self.directory), entries=count)
        return count

    def _prepare_directory(self) -> None:
        """Create the directory with mode 0700 on first use.

        Raises:
            CacheError: If the directory cannot be created, is owned by another
                user, or is writable by group or others
        """
        if self._directory_ready:
            return
        try:
            self.directory.mkdir(mode=stat.S_IRWXU, parents=True, exist_ok=True)
            info = self.directory.stat()
        except OSError as exc:
            raise CacheError(
                f"Unable to create cache directory {self.directory}",
                {"error": str(exc)},
            ) from exc

        if not stat.S_ISDIR(info.st_mode):
            raise CacheError(f"Cache path {self.directory} is not a directory")

        # ownership and modes are not meaningful on Windows
        if hasattr(os, "getuid"):
            if info.st_uid != os.getuid() or info.st_mode & (stat.S_IWGRP | stat.S_IWOTH):
                raise CacheError(
                    f"Insecure cache directory {self.directory}",
                    {"owner": info.st_uid, "mode": oct(stat.S_IMODE(info.st_mode))},
                )
        self._directory_ready = True

    def _read(self, key: str) -> Optional[Mapping[str, str]]:
        path = self.entry_path(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            raise CacheError(
                f"Unable to read cache entry {path}",
                {"key": key, "error": str(exc)},
            ) from exc

        values = self._validate(payload, path)
        if payload["key"] != key:
            # Digest collision with another key: treat as a miss
            return None
        return MappingProxyType(values)

    def _validate(self, payload: Any, path: Path) -> Dict[str, str]:
        if (
            not isinstance(payload, dict)
            or not isinstance(payload.get("key"), str)
            or not isinstance(payload.get("values"), dict)
        ):
            raise CacheError(f"Malformed cache entry {path}")

        values = payload["values"]
        if not all(isinstance(k, str) and isinstance(v, str) for k, v in values.items()):
            raise CacheError(f"Malformed cache entry {path}")
        return values

    def _write(self, key: str, values: Dict[str, str]) -> None:
        path = self.entry_path(key)
        tmp_name: Optional[str] = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"key": key, "values": values}, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise CacheError(
                f"Unable to write cache entry {path}",
                {"key": key, "error": str(exc)},
            ) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        self.logger.debug("Cache entry stored", key=key, variables=len(values))
