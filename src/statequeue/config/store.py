"""Store and compaction configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, Final, Literal, cast

from .env import read_env_bool, read_env_int, read_env_var
from .errors import ConfigurationError

type CompactionMode = Literal["eager", "threshold"]

COMPACTION_MODES: Final[tuple[str, ...]] = ("eager", "threshold")
DEFAULT_TRANSACTION_LIMIT: Final[int] = 20

ENV_COMPACT_ENABLED: Final[str] = "STATEQUEUE_COMPACT_ENABLED"
ENV_COMPACT_TRANSACTION_LIMIT: Final[str] = "STATEQUEUE_COMPACT_TRANSACTION_LIMIT"
ENV_COMPACT_MODE: Final[str] = "STATEQUEUE_COMPACT_MODE"

# camelCase spellings accepted in partial overrides
_KEY_ALIASES: Final[dict[str, str]] = {"transactionLimit": "transaction_limit"}


@dataclass(slots=True, frozen=True)
class CompactionConfig:
    """Controls when the store folds settled transactions into its base state.

    ``enabled`` toggles automatic compaction; explicit ``Store.compact()`` calls
    are always honoured. In ``"eager"`` mode every dispatch and every settled
    transaction triggers an attempt. In ``"threshold"`` mode an attempt is only
    made once the queue holds at least ``transaction_limit`` transactions.
    """

    enabled: bool = True
    transaction_limit: int = DEFAULT_TRANSACTION_LIMIT
    mode: CompactionMode = "eager"

    def __post_init__(self) -> None:
        if self.transaction_limit < 1:
            raise ConfigurationError(
                f"transaction_limit must be positive, got {self.transaction_limit}",
                setting="transaction_limit",
            )
        if self.mode not in COMPACTION_MODES:
            raise ConfigurationError(f"Unknown compaction mode: {self.mode!r}", setting="mode")

    def should_compact(self, queue_length: int) -> bool:
        if not self.enabled:
            return False
        if self.mode == "threshold":
            return queue_length >= self.transaction_limit
        return True


@dataclass(slots=True, frozen=True)
class StoreConfig:
    compact: CompactionConfig = field(default_factory=CompactionConfig)


DEFAULT_STORE_CONFIG: Final[StoreConfig] = StoreConfig()


def merge_config(base: Any, override: Mapping[str, Any]) -> Any:
    """Recursively merge a partial ``override`` mapping over a config dataclass.

    Nested dataclass fields accept nested mappings; every other value replaces
    the field as given. Unknown keys raise ``ConfigurationError``.
    """

    known = {item.name for item in fields(base)}
    changes: dict[str, Any] = {}
    for raw_key, value in override.items():
        key = _KEY_ALIASES.get(raw_key, raw_key)
        if key not in known:
            raise ConfigurationError(
                f"Unknown configuration key for {type(base).__name__}: {raw_key!r}",
                setting=raw_key,
            )
        current = getattr(base, key)
        if is_dataclass(current) and isinstance(value, Mapping):
            changes[key] = merge_config(current, cast("Mapping[str, Any]", value))
        else:
            changes[key] = value
    return replace(base, **changes)


def resolve_store_config(config: StoreConfig | Mapping[str, Any] | None) -> StoreConfig:
    """Normalise the ``config`` argument accepted by ``Store``."""

    if config is None:
        return DEFAULT_STORE_CONFIG
    if isinstance(config, StoreConfig):
        return config
    return cast("StoreConfig", merge_config(DEFAULT_STORE_CONFIG, config))


def get_store_config(*, base: StoreConfig | None = None) -> StoreConfig:
    """Build a store configuration from ``STATEQUEUE_COMPACT_*`` variables."""

    compact: dict[str, Any] = {}
    enabled = read_env_bool(ENV_COMPACT_ENABLED)
    if enabled is not None:
        compact["enabled"] = enabled
    limit = read_env_int(ENV_COMPACT_TRANSACTION_LIMIT)
    if limit is not None:
        compact["transaction_limit"] = limit
    mode = read_env_var(ENV_COMPACT_MODE)
    if mode is not None:
        compact["mode"] = mode.lower()

    start = base or DEFAULT_STORE_CONFIG
    if not compact:
        return start
    return cast("StoreConfig", merge_config(start, {"compact": compact}))
