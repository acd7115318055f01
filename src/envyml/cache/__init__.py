"""Cache layer for flattened documents.

Provides pluggable stores keyed by file identity and modification time:
- MemoryCacheStore - in-process dict, for tests
- FileCacheStore - JSON entries in a directory, shared across processes

Usage:
    from envyml.cache import CachedDocumentLoader, create_cache_store

    store = create_cache_store("file", directory="/var/cache/envyml")
    values = CachedDocumentLoader(store).load("env.yml")
"""

from .base import CacheStore, derive_cache_key
from .factory import BackendType, create_cache_store
from .file import FileCacheStore
from .loader import DEFAULT_ROOT_KEY, CachedDocumentLoader
from .memory import MemoryCacheStore

__all__ = [
    "CacheStore",
    "derive_cache_key",
    "MemoryCacheStore",
    "FileCacheStore",
    "create_cache_store",
    "BackendType",
    "CachedDocumentLoader",
    "DEFAULT_ROOT_KEY",
]
