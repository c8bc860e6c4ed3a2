from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from statequeue.config import (
    ENV_COMPACT_ENABLED,
    ENV_COMPACT_MODE,
    ENV_COMPACT_TRANSACTION_LIMIT,
)

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def clean_store_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (ENV_COMPACT_ENABLED, ENV_COMPACT_MODE, ENV_COMPACT_TRANSACTION_LIMIT):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def restore_root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    try:
        yield root
    finally:
        for handler in list(root.handlers):
            if handler not in handlers:
                root.removeHandler(handler)
                handler.close()
        for handler in handlers:
            if handler not in root.handlers:
                root.addHandler(handler)
        root.setLevel(level)
