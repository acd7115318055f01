"""Cache store protocol and cache key derivation.

A cache key combines the file's identity with its modification time:

    <basename>_<sha1 of absolute path>_<st_mtime_ns>

Entries never expire. Editing the file changes its mtime and therefore its
key, so a stale entry is never looked up again. Old entries are simply left
behind.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Callable, Mapping, Protocol, Union, runtime_checkable

KEY_SEPARATOR = "_"

FlatMapFactory = Callable[[], Mapping[str, str]]


def derive_cache_key(path: Union[str, Path]) -> str:
    """Build the cache key for the file at ``path``.

    Raises:
        OSError: If the file cannot be stat'ed
    """
    absolute = os.path.abspath(os.fspath(path))
    path_hash = hashlib.sha1(absolute.encode("utf-8")).hexdigest()
    mtime = os.stat(absolute).st_mtime_ns
    return KEY_SEPARATOR.join([os.path.basename(absolute), path_hash, str(mtime)])


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for persistent flat-map caches.

    Stored mappings are read-only; ``get`` returns the same content for a
    key for as long as the entry exists.
    """

    def get(self, key: str, compute: FlatMapFactory) -> Mapping[str, str]:
        """Return the entry for ``key``, computing and storing it on a miss.

        Errors raised by ``compute`` propagate and nothing is stored.

        Raises:
            CacheError: If the backing storage cannot be read or written
        """
        ...

    def exists(self, key: str) -> bool:
        """Check whether an entry is stored for ``key``."""
        ...

    def clear(self) -> int:
        """Remove every entry and return how many were removed."""
        ...
