"""Transaction engine: subscribers, transactions, compaction and the store."""

from __future__ import annotations

from .cancellation import CancellationToken
from .compaction import CompactionResult, compact, fold, fold_step, split_settled_prefix
from .errors import NoEventLoopError, StoreError, TransactionAbortedError
from .settlement import Settlement
from .store import Store
from .subscribers import SubscriberList
from .transaction import TERMINAL_STATES, Transaction, TransactionInterface, TransactionState
from .types import CancelTransaction, ErrorHandler, Patch, Subscriber, Worker

__all__ = [
    "TERMINAL_STATES",
    "CancelTransaction",
    "CancellationToken",
    "CompactionResult",
    "ErrorHandler",
    "NoEventLoopError",
    "Patch",
    "Settlement",
    "Store",
    "StoreError",
    "Subscriber",
    "SubscriberList",
    "Transaction",
    "TransactionAbortedError",
    "TransactionInterface",
    "TransactionState",
    "Worker",
    "compact",
    "fold",
    "fold_step",
    "split_settled_prefix",
]
