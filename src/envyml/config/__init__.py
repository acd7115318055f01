"""Configuration module for envyml itself.

Example:
    from envyml.config import get_settings

    settings = get_settings()
    print(settings.document_path, settings.cache_dir)
"""

from envyml.config.env_loader import EnvLoader
from envyml.config.settings import (
    DEFAULT_DOCUMENT_NAME,
    DOCUMENT_PATH_VARIABLE,
    EnvymlSettings,
    default_cache_dir,
    get_settings,
    reset_settings,
    resolve_document_path,
)

__all__ = [
    "EnvLoader",
    "EnvymlSettings",
    "get_settings",
    "reset_settings",
    "default_cache_dir",
    "resolve_document_path",
    "DOCUMENT_PATH_VARIABLE",
    "DEFAULT_DOCUMENT_NAME",
]
