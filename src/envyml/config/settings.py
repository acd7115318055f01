"""Dataclass-based settings for envyml.

Environment variables (with the default ``ENVYML`` prefix):
    ENV_FILE_PATH: Document to load at bootstrap (takes precedence)
    {prefix}_FILE_PATH: Document to load at bootstrap
    {prefix}_CACHE_BACKEND: "file" (default) or "memory"
    {prefix}_CACHE_DIR: Directory of the file cache (default: <tmp>/envyml-cache-<uid>)
    {prefix}_ROOT_KEY: Top-level key promoted to the root (default: ENV)
    {prefix}_USE_PUTENV: Mirror loaded variables into os.environ (default: true)
    {prefix}_LOG_LEVEL: Logging level (default: WARNING)
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

from envyml.exceptions import ConfigurationError

from .env_loader import EnvLoader

DOCUMENT_PATH_VARIABLE = "ENV_FILE_PATH"
DEFAULT_DOCUMENT_NAME = "env.yml"

_ALLOWED_BACKENDS = {"file", "memory"}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def default_cache_dir() -> Path:
    """Per-user directory under the system temp dir."""
    suffix = f"-{os.getuid()}" if hasattr(os, "getuid") else ""
    return Path(tempfile.gettempdir()) / f"envyml-cache{suffix}"


def resolve_document_path(environ: Mapping[str, str], prefix: str = "ENVYML") -> Path:
    """Document to load: ENV_FILE_PATH, then {prefix}_FILE_PATH, then ./env.yml."""
    document = environ.get(DOCUMENT_PATH_VARIABLE) or environ.get(f"{prefix}_FILE_PATH")
    if document:
        return Path(document)
    return Path.cwd() / DEFAULT_DOCUMENT_NAME


def _parse_bool(value: str, name: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


@dataclass
class EnvymlSettings:
    """Settings controlling how envyml loads and caches documents.

    Attributes:
        document_path: Hierarchical document loaded at bootstrap
        cache_backend: Cache store backend ("file" or "memory")
        cache_dir: Directory used by the file backend
        root_key: Top-level key whose children are promoted to the root
        use_putenv: Mirror loaded variables into os.environ
        log_level: Logging level name
        prefix: Environment variable prefix these settings were read with
    """

    document_path: Path = field(default_factory=lambda: Path.cwd() / DEFAULT_DOCUMENT_NAME)
    cache_backend: str = "file"
    cache_dir: Path = field(default_factory=default_cache_dir)
    root_key: Optional[str] = "ENV"
    use_putenv: bool = True
    log_level: str = "WARNING"
    prefix: str = "ENVYML"

    def __post_init__(self) -> None:
        self.document_path = Path(self.document_path)
        self.cache_dir = Path(self.cache_dir)
        self.cache_backend = self.cache_backend.lower()
        self.log_level = self.log_level.upper()
        self.validate()

    @classmethod
    def from_env(
        cls,
        prefix: str = "ENVYML",
        env_file: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> "EnvymlSettings":
        """Load settings from a .env file, the environment and overrides.

        Raises:
            ConfigurationError: If a value is invalid
        """
        env_data = EnvLoader(env_file).load(overrides=overrides, environ=environ)

        cache_dir = env_data.get(f"{prefix}_CACHE_DIR")
        root_key = env_data.get(f"{prefix}_ROOT_KEY", "ENV")

        return cls(
            document_path=resolve_document_path(env_data, prefix),
            cache_backend=env_data.get(f"{prefix}_CACHE_BACKEND", "file"),
            cache_dir=Path(cache_dir) if cache_dir else default_cache_dir(),
            root_key=root_key or None,
            use_putenv=_parse_bool(
                env_data.get(f"{prefix}_USE_PUTENV", "true"), f"{prefix}_USE_PUTENV"
            ),
            log_level=env_data.get(f"{prefix}_LOG_LEVEL", "WARNING"),
            prefix=prefix,
        )

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)

    def validate(self) -> None:
        if self.cache_backend not in _ALLOWED_BACKENDS:
            raise ConfigurationError(
                f"Invalid cache backend '{self.cache_backend}'. Expected one of {sorted(_ALLOWED_BACKENDS)}."
            )

        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(f"Invalid log level '{self.log_level}'.")


# Global settings storage per prefix
_global_settings: Dict[str, EnvymlSettings] = {}


def get_settings(prefix: str = "ENVYML", reload: bool = False) -> EnvymlSettings:
    """Get or create the settings instance for a prefix."""
    if prefix not in _global_settings or reload:
        _global_settings[prefix] = EnvymlSettings.from_env(prefix=prefix)
    return _global_settings[prefix]


def reset_settings(prefix: Optional[str] = None) -> None:
    """Reset settings (primarily for testing)

    Args:
        prefix: Specific prefix to reset, or None to reset all
    """
    if prefix:
        _global_settings.pop(prefix, None)
    else:
        _global_settings.clear()
