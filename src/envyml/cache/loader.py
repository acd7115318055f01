"""Load hierarchical documents as flat maps through a cache store."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional, Union

from envyml.document import DocumentParser, YamlDocumentParser
from envyml.exceptions import FileAccessError
from envyml.flatten import flatten
from envyml.logger import Logger, create_logger
from envyml.parser import check_readable

from .base import CacheStore, derive_cache_key
from .memory import MemoryCacheStore

DEFAULT_ROOT_KEY = "ENV"


class CachedDocumentLoader:
    """Parse and flatten documents once per modification time.

    As long as a file's mtime is unchanged, repeated loads return the stored
    flat map without reading the file again. Content changed without an
    mtime change is not noticed.

    Example:
        loader = CachedDocumentLoader(FileCacheStore("/var/cache/envyml"))
        values = loader.load("env.yml")
    """

    def __init__(
        self,
        store: Optional[CacheStore] = None,
        parser: Optional[DocumentParser] = None,
        root_key: Optional[str] = DEFAULT_ROOT_KEY,
        logger: Optional[Logger] = None,
    ) -> None:
        self.store = store if store is not None else MemoryCacheStore()
        self.parser = parser or YamlDocumentParser()
        self.root_key = root_key
        self.logger = logger or create_logger(name="envyml.cache")

    def load(self, path: Union[str, Path]) -> Mapping[str, str]:
        """Return the flat map for the document at ``path``.

        Raises:
            FileAccessError: If the path is missing, unreadable or a directory
            FormatError: If the document cannot be parsed
            CacheError: If the cache store fails
        """
        check_readable(path)
        try:
            key = derive_cache_key(path)
        except OSError as exc:
            raise FileAccessError(str(path), str(exc)) from exc

        def compute() -> Mapping[str, str]:
            self.logger.info("Parsing document", path=str(path))
            return flatten(self.parser.parse(path), self.root_key)

        return self.store.get(key, compute)
