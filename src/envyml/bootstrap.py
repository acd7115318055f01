"""Process bootstrap hook.

Call ``bootstrap()`` once, as early as possible, before anything reads
configuration from the environment:

    # myapp/__init__.py
    from envyml.bootstrap import bootstrap
    bootstrap()

The document path comes from ``ENV_FILE_PATH`` and defaults to ``env.yml``
in the working directory. Loaded variables override existing ones.
"""

from __future__ import annotations

from typing import Optional

from envyml.cache import create_cache_store
from envyml.config import EnvymlSettings, get_settings, resolve_document_path
from envyml.environment import EnvironmentStore
from envyml.envyml import Envyml
from envyml.logger import create_logger

_bootstrapped: Optional[Envyml] = None


def bootstrap(
    settings: Optional[EnvymlSettings] = None,
    store: Optional[EnvironmentStore] = None,
    force: bool = False,
) -> Envyml:
    """Overload the configured document into the environment once.

    Later calls return the first instance without loading again, unless
    ``force`` is True.

    Raises:
        FileAccessError: If the document cannot be read
        FormatError: If the document is invalid
        ConfigurationError: If envyml's own settings are invalid
    """
    global _bootstrapped
    if _bootstrapped is not None and not force:
        return _bootstrapped

    settings = settings or get_settings()
    logger = create_logger(name="envyml", level=settings.log_level_value)
    cache = create_cache_store(
        settings.cache_backend,  # type: ignore[arg-type]
        directory=settings.cache_dir,
        logger=logger,
    )

    envyml = Envyml(
        store=store if store is not None else EnvironmentStore.from_os(use_putenv=settings.use_putenv),
        cache=cache,
        root_key=settings.root_key,
        logger=logger,
    )
    envyml.overload(settings.document_path)
    logger.info("Environment bootstrapped", path=str(settings.document_path))

    _bootstrapped = envyml
    return envyml


def reset_bootstrap() -> None:
    """Forget the bootstrapped instance (primarily for testing)."""
    global _bootstrapped
    _bootstrapped = None


__all__ = ["bootstrap", "reset_bootstrap", "resolve_document_path"]
