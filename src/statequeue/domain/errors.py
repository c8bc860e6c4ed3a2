"""Exception types raised by the transaction engine."""

from __future__ import annotations


class StoreError(RuntimeError):
    """Base class for store and transaction errors."""


class NoEventLoopError(StoreError):
    """Raised when an asynchronous transaction is started outside an event loop."""


class TransactionAbortedError(StoreError):
    """Raised to a worker whose transaction was cancelled while it was waiting.

    Only ``Settlement.wait`` raises it, and only when the caller passed its own
    cancellation token. The transaction is already ``aborted`` at that point,
    so a worker may let the error escape without affecting the store.
    """
