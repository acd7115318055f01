"""envyml - load hierarchical YAML configuration into environment variables.

This package provides:
- envyml: the Envyml facade (load, overload, load_env, load_dotenv)
- flatten: document flattening into ``A_B_C`` style names
- parser / lexer: dotenv syntax with quoting, interpolation and commands
- cache: modification-time keyed cache of flattened documents
- populate: first-wins / override population of the environment store
- bootstrap: one-shot process hook
"""

__version__ = "1.0.0"

from envyml.bootstrap import bootstrap, reset_bootstrap
from envyml.cache import (
    CachedDocumentLoader,
    CacheStore,
    FileCacheStore,
    MemoryCacheStore,
    create_cache_store,
    derive_cache_key,
)
from envyml.commands import CommandResult, CommandRunner, DisabledCommandRunner, ShellCommandRunner
from envyml.config import EnvymlSettings, get_settings, reset_settings
from envyml.environment import EnvironmentStore
from envyml.envyml import Envyml
from envyml.exceptions import (
    CacheError,
    CommandExecutionError,
    ConfigurationError,
    EnvymlError,
    FileAccessError,
    FormatError,
)
from envyml.flatten import flatten
from envyml.lexer import ExpressionResolver, ParseCursor
from envyml.logger import Logger, StructuredLogger, create_logger, get_logger
from envyml.parser import DotenvParser
from envyml.populate import REGISTRY_NAME, OwnedNameRegistry, Populator

__all__ = [
    "__version__",
    # Facade
    "Envyml",
    "bootstrap",
    "reset_bootstrap",
    # Core
    "flatten",
    "DotenvParser",
    "ExpressionResolver",
    "ParseCursor",
    "Populator",
    "OwnedNameRegistry",
    "REGISTRY_NAME",
    "EnvironmentStore",
    # Commands
    "CommandRunner",
    "CommandResult",
    "ShellCommandRunner",
    "DisabledCommandRunner",
    # Cache
    "CacheStore",
    "MemoryCacheStore",
    "FileCacheStore",
    "CachedDocumentLoader",
    "create_cache_store",
    "derive_cache_key",
    # Config
    "EnvymlSettings",
    "get_settings",
    "reset_settings",
    # Logger
    "Logger",
    "StructuredLogger",
    "create_logger",
    "get_logger",
    # Exceptions
    "EnvymlError",
    "FileAccessError",
    "FormatError",
    "CommandExecutionError",
    "CacheError",
    "ConfigurationError",
]
