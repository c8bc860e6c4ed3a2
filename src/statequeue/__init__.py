from __future__ import annotations

from importlib import metadata

from statequeue.config import CompactionConfig, StoreConfig
from statequeue.domain import (
    CancellationToken,
    Settlement,
    Store,
    Transaction,
    TransactionInterface,
    TransactionState,
)

try:
    __version__ = metadata.version("statequeue")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"

__all__ = [
    "CancellationToken",
    "CompactionConfig",
    "Settlement",
    "Store",
    "StoreConfig",
    "Transaction",
    "TransactionInterface",
    "TransactionState",
    "__version__",
]
