"""In-memory cache store.

Lives as long as the instance. Used by tests and by processes that do not
want anything written to disk.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping

from .base import FlatMapFactory


class MemoryCacheStore:
    """Dict-backed cache store.

    Example:
        store = MemoryCacheStore()
        values = store.get("env.yml_abc_1", lambda: {"A": "1"})
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Mapping[str, str]] = {}

    def get(self, key: str, compute: FlatMapFactory) -> Mapping[str, str]:
        entry = self._entries.get(key)
        if entry is None:
            entry = MappingProxyType(dict(compute()))
            self._entries[key] = entry
        return entry

    def exists(self, key: str) -> bool:
        return key in self._entries

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)
