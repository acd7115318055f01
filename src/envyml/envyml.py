"""Load YAML documents and dotenv files into the environment.

Usage:
    from envyml import Envyml

    envyml = Envyml()
    envyml.load("env.yml")               # existing variables win
    envyml.overload("env.override.yml")  # loaded variables win
    envyml.load_env("env.yml")           # env.yml, env.yml.local, env.yml.<APP_ENV>, ...
    envyml.load_dotenv(".env")           # dotenv syntax with interpolation
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Sequence, Union

from envyml.cache import DEFAULT_ROOT_KEY, CachedDocumentLoader, CacheStore, MemoryCacheStore
from envyml.commands import CommandRunner, ShellCommandRunner
from envyml.document import DocumentParser
from envyml.environment import EnvironmentStore
from envyml.lexer import ExpressionResolver
from envyml.logger import Logger, create_logger
from envyml.parser import DotenvParser
from envyml.populate import Populator

PathLike = Union[str, Path]


class Envyml:
    """Entry point tying the cache, parsers and populator together.

    Args:
        store: Environment store to populate; defaults to one seeded from
            the OS environment
        cache: Cache store for flattened documents (in-memory by default)
        document_parser: Parser for hierarchical documents (YAML by default)
        command_runner: Runner for ``$(...)`` in dotenv values (POSIX shell
            by default)
        root_key: Top-level document key promoted to the root
        use_putenv: Mirror variables into ``os.environ`` when ``store`` is
            created here
        logger: Optional logger instance
    """

    def __init__(
        self,
        store: Optional[EnvironmentStore] = None,
        cache: Optional[CacheStore] = None,
        document_parser: Optional[DocumentParser] = None,
        command_runner: Optional[CommandRunner] = None,
        root_key: Optional[str] = DEFAULT_ROOT_KEY,
        use_putenv: bool = False,
        logger: Optional[Logger] = None,
    ) -> None:
        self.logger = logger or create_logger(name="envyml")
        self.store = store if store is not None else EnvironmentStore.from_os(use_putenv=use_putenv)
        self.loader = CachedDocumentLoader(
            store=cache if cache is not None else MemoryCacheStore(),
            parser=document_parser,
            root_key=root_key,
            logger=self.logger,
        )
        resolver = ExpressionResolver(
            store=self.store,
            command_runner=command_runner or ShellCommandRunner(logger=self.logger),
            logger=self.logger,
        )
        self.parser = DotenvParser(resolver, logger=self.logger)
        self.populator = Populator(self.store, logger=self.logger)

    def load(self, path: PathLike, *extra_paths: PathLike) -> None:
        """Load one or several documents; existing variables are kept.

        Raises:
            FileAccessError: When a file does not exist or is not readable
            FormatError: When a document has a syntax error
        """
        self._do_load(False, [path, *extra_paths])

    def overload(self, path: PathLike, *extra_paths: PathLike) -> None:
        """Load one or several documents, overriding existing variables."""
        self._do_load(True, [path, *extra_paths])

    def load_env(
        self,
        path: PathLike,
        var_name: str = "APP_ENV",
        default_env: str = "dev",
        test_envs: Sequence[str] = ("test",),
    ) -> None:
        """Load a document and its environment-specific overlays.

        Loads ``path`` (or ``path.dist`` when only that exists), then
        ``path.local`` unless the app env is a test env, then ``path.<env>``
        and ``path.<env>.local`` unless the app env is ``local``.

        Args:
            path: Base document
            var_name: Variable holding the app env
            default_env: App env used when ``var_name`` is undefined
            test_envs: App envs for which ``path.local`` is ignored
        """
        base = os.fspath(path)
        dist = f"{base}.dist"
        if os.path.exists(base) or not os.path.exists(dist):
            self.load(base)
        else:
            self.load(dist)

        env = self.store.get(var_name)
        if env is None:
            env = default_env
            self.populate({var_name: env})

        local = f"{base}.local"
        if env not in test_envs and os.path.exists(local):
            self.load(local)
            env = self.store.get(var_name) or env

        if env == "local":
            return

        for overlay in (f"{base}.{env}", f"{base}.{env}.local"):
            if os.path.exists(overlay):
                self.load(overlay)

    def load_dotenv(self, path: PathLike, *extra_paths: PathLike, override: bool = False) -> None:
        """Load dotenv-syntax files (quoting, interpolation, commands).

        Raises:
            FileAccessError: When a file does not exist or is not readable
            FormatError: When a file has a syntax error
            CommandExecutionError: When a command substitution fails
        """
        for file_path in [path, *extra_paths]:
            self.logger.info("Loading dotenv file", path=str(file_path))
            self.populate(self.parser.parse_file(file_path), override_existing=override)

    def parse(self, data: str, path: str = ".env") -> Dict[str, str]:
        """Parse dotenv text without touching the environment."""
        return self.parser.parse(data, path=path)

    def populate(self, values: Mapping[str, str], override_existing: bool = False) -> None:
        """Set variables in the environment store."""
        self.populator.populate(values, override_existing=override_existing)

    def _do_load(self, override_existing: bool, paths: Iterable[PathLike]) -> None:
        for path in paths:
            self.logger.info("Loading document", path=str(path), override=override_existing)
            self.populate(self.loader.load(path), override_existing=override_existing)


__all__ = ["Envyml"]
