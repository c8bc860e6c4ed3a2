"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import Final

from .errors import ConfigurationError, MissingConfigurationError

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSY: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


def read_env_var(name: str) -> str | None:
    """Return the stripped value of ``name`` or ``None`` when unset or blank."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def require_env_var(name: str) -> str:
    """Return a required environment variable by name."""

    value = read_env_var(name)
    if value is None:
        raise MissingConfigurationError(name)
    return value


def read_env_bool(name: str) -> bool | None:
    value = read_env_var(name)
    if value is None:
        return None
    lowered = value.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}", setting=name)


def read_env_int(name: str) -> int | None:
    value = read_env_var(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid integer for {name}: {value!r}", setting=name
        ) from exc
