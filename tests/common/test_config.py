from __future__ import annotations

import pytest

from statequeue.config import (
    DEFAULT_STORE_CONFIG,
    CompactionConfig,
    ConfigurationError,
    MissingConfigurationError,
    StoreConfig,
    get_store_config,
    merge_config,
    require_env_var,
    resolve_store_config,
)


def test_default_config_compacts_eagerly_with_limit_twenty() -> None:
    config = resolve_store_config(None)

    assert config is DEFAULT_STORE_CONFIG
    assert config.compact == CompactionConfig(enabled=True, transaction_limit=20, mode="eager")


def test_partial_mapping_is_merged_over_defaults() -> None:
    config = resolve_store_config({"compact": {"enabled": False}})

    assert config.compact.enabled is False
    assert config.compact.transaction_limit == 20
    assert config.compact.mode == "eager"


def test_camel_case_transaction_limit_is_accepted() -> None:
    config = resolve_store_config({"compact": {"transactionLimit": 5}})

    assert config.compact.transaction_limit == 5


def test_store_config_instances_pass_through_unchanged() -> None:
    config = StoreConfig(compact=CompactionConfig(mode="threshold", transaction_limit=3))

    assert resolve_store_config(config) is config


def test_merge_config_rejects_unknown_keys() -> None:
    with pytest.raises(ConfigurationError) as exc:
        merge_config(DEFAULT_STORE_CONFIG, {"compact": {"limit": 3}})

    assert "limit" in str(exc.value)
    assert exc.value.setting == "limit"


@pytest.mark.parametrize(
    "override",
    [{"transaction_limit": 0}, {"transaction_limit": -4}, {"mode": "lazy"}],
)
def test_invalid_compaction_values_raise(override: dict[str, object]) -> None:
    with pytest.raises(ConfigurationError):
        merge_config(DEFAULT_STORE_CONFIG, {"compact": override})


def test_should_compact_follows_mode() -> None:
    eager = CompactionConfig()
    threshold = CompactionConfig(mode="threshold", transaction_limit=3)
    disabled = CompactionConfig(enabled=False)

    assert eager.should_compact(1)
    assert not threshold.should_compact(2)
    assert threshold.should_compact(3)
    assert not disabled.should_compact(100)


@pytest.mark.usefixtures("clean_store_env")
def test_get_store_config_without_environment_returns_defaults() -> None:
    assert get_store_config() == DEFAULT_STORE_CONFIG


@pytest.mark.usefixtures("clean_store_env")
def test_get_store_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STATEQUEUE_COMPACT_ENABLED", "yes")
    monkeypatch.setenv("STATEQUEUE_COMPACT_TRANSACTION_LIMIT", "7")
    monkeypatch.setenv("STATEQUEUE_COMPACT_MODE", "Threshold")

    config = get_store_config()

    assert config.compact == CompactionConfig(enabled=True, transaction_limit=7, mode="threshold")


@pytest.mark.usefixtures("clean_store_env")
def test_get_store_config_rejects_malformed_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STATEQUEUE_COMPACT_ENABLED", "sometimes")

    with pytest.raises(ConfigurationError) as exc:
        get_store_config()

    assert "STATEQUEUE_COMPACT_ENABLED" in str(exc.value)
    assert exc.value.setting == "STATEQUEUE_COMPACT_ENABLED"


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STATEQUEUE_EXAMPLE", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_var("STATEQUEUE_EXAMPLE")

    assert exc.value.setting == "STATEQUEUE_EXAMPLE"
