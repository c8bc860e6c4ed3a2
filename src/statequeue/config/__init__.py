"""Application configuration helpers."""

from __future__ import annotations

from .env import read_env_bool, read_env_int, read_env_var, require_env_var
from .errors import ConfigurationError, MissingConfigurationError
from .http import HttpConfig, RateLimit
from .store import (
    DEFAULT_STORE_CONFIG,
    DEFAULT_TRANSACTION_LIMIT,
    ENV_COMPACT_ENABLED,
    ENV_COMPACT_MODE,
    ENV_COMPACT_TRANSACTION_LIMIT,
    CompactionConfig,
    CompactionMode,
    StoreConfig,
    get_store_config,
    merge_config,
    resolve_store_config,
)

__all__ = [
    "DEFAULT_STORE_CONFIG",
    "DEFAULT_TRANSACTION_LIMIT",
    "ENV_COMPACT_ENABLED",
    "ENV_COMPACT_MODE",
    "ENV_COMPACT_TRANSACTION_LIMIT",
    "CompactionConfig",
    "CompactionMode",
    "ConfigurationError",
    "HttpConfig",
    "MissingConfigurationError",
    "RateLimit",
    "StoreConfig",
    "get_store_config",
    "merge_config",
    "read_env_bool",
    "read_env_int",
    "read_env_var",
    "require_env_var",
    "resolve_store_config",
]
