"""The transactional, observable state store."""

from __future__ import annotations

import asyncio
from logging import Logger, getLogger
from typing import TYPE_CHECKING, Any

from statequeue.config import resolve_store_config

from .compaction import compact, fold, fold_step, split_settled_prefix
from .subscribers import SubscriberList
from .transaction import Transaction, TransactionState

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from statequeue.config import StoreConfig

    from .types import CancelTransaction, ErrorHandler, Patch, Subscriber, Worker

log = getLogger(__name__)


class Store[S]:
    """Holds a base state and an ordered queue of transactions on top of it.

    ``settled_state`` is the compacted base, ``current_state`` the derived state
    last delivered to subscribers: the base folded with every queued
    transaction's current contribution.

    All methods must be called from the thread running the event loop that
    hosts the asynchronous transactions; ``dispatch`` and ``compact`` never
    suspend.
    """

    def __init__(
        self,
        initial_state: S,
        config: StoreConfig | Mapping[str, Any] | None = None,
        *,
        logger: Logger | None = None,
    ) -> None:
        self.config = resolve_store_config(config)
        self.log = logger or log
        self.initial_state = initial_state
        self.settled_state = initial_state
        self.current_state = initial_state
        self.transactions: list[Transaction[S]] = []
        self.subscribers: SubscriberList[S] = SubscriberList()
        self.error_handler: ErrorHandler[S] = self._log_unhandled_error
        self._compaction_pending = False

    def __repr__(self) -> str:
        return (
            f"Store(current_state={self.current_state!r}, "
            f"transactions={len(self.transactions)}, subscribers={len(self.subscribers)})"
        )

    @property
    def compaction_pending(self) -> bool:
        return self._compaction_pending

    def dispatch(self, *patches: Patch[S]) -> Store[S]:
        """Apply ``patches`` at once as a completed transaction."""

        transaction: Transaction[S] = Transaction.completed(patches, logger=self.log)
        self._push(transaction)
        self.current_state = fold_step(self.current_state, transaction, self.error_handler)
        self.subscribers.emit(self.current_state)
        if self.config.compact.should_compact(len(self.transactions)):
            self.compact()
        return self

    def dispatch_fn[**P](
        self, fn: Callable[P, Patch[S] | Sequence[Patch[S]]]
    ) -> Callable[P, None]:
        """Wrap a patch factory into a function dispatching what it returns."""

        def dispatcher(*args: P.args, **kwargs: P.kwargs) -> None:
            self.dispatch(*_ensure_patches(fn(*args, **kwargs)))

        return dispatcher

    def run(self, worker: Worker[S]) -> CancelTransaction:
        """Start ``worker`` as a new transaction and return its cancel function.

        The worker begins on a later event loop iteration, so the caller always
        holds the cancel function before the first patch lands.
        """

        transaction: Transaction[S] = Transaction(logger=self.log)
        cancel = transaction.run(worker, self.update_state, self._on_transaction_settled)
        self._push(transaction)
        self.log.debug("Started transaction %r", transaction.name)
        return cancel

    def start_transaction(self, worker: Worker[S]) -> CancelTransaction:
        return self.run(worker)

    def transaction_fn[**P](self, fn: Callable[P, Worker[S]]) -> Callable[P, CancelTransaction]:
        """Wrap a worker factory into a function starting a transaction."""

        def starter(*args: P.args, **kwargs: P.kwargs) -> CancelTransaction:
            return self.run(fn(*args, **kwargs))

        return starter

    def handle_errors(self, error_handler: ErrorHandler[S]) -> Store[S]:
        """Install ``error_handler`` and refold any queued failures through it."""

        self.error_handler = error_handler
        if any(tx.state is TransactionState.THROWN for tx in self.transactions):
            self.update_state()
        return self

    def update_state(self) -> Store[S]:
        """Recompute the derived state and notify subscribers."""

        self.current_state = fold(self.settled_state, self.transactions, self.error_handler)
        self.subscribers.emit(self.current_state)
        return self

    def compact(self) -> Store[S]:
        """Fold the leading run of settled transactions into ``settled_state``."""

        result = compact(self.settled_state, self.transactions, self.error_handler)
        self.settled_state = result.base_state
        self.transactions = result.queue
        if result.compacted:
            self.log.debug(
                "Compacted %d transaction(s), %d remaining",
                len(result.compacted),
                len(result.queue),
            )
        if result.head is not None:
            result.head.settlement.resolve(self.settled_state)
        return self

    def has_settled(self) -> bool:
        if self._compaction_pending:
            return False
        return all(transaction.has_settled() for transaction in self.transactions)

    def subscribe(self, subscriber: Subscriber[S]) -> Store[S]:
        """Register ``subscriber`` and call it once with the current state."""

        self.subscribers.push(subscriber)
        subscriber(self.current_state)
        return self

    def unsubscribe(self, subscriber: Subscriber[S]) -> Store[S]:
        self.subscribers.remove(subscriber)
        return self

    def _push(self, transaction: Transaction[S]) -> None:
        self.transactions.append(transaction)
        self._release_next_settlement()

    def _release_next_settlement(self) -> None:
        """Resolve the first unsettled transaction once everything before it has settled.

        Compaction resolves the same settlement with the same value; this covers
        the queues that automatic compaction leaves alone.
        """

        prefix, rest = split_settled_prefix(self.transactions)
        if rest:
            rest[0].settlement.resolve(fold(self.settled_state, prefix, self.error_handler))

    def _on_transaction_settled(self) -> None:
        if self._compaction_pending:
            return
        if not self.config.compact.should_compact(len(self.transactions)):
            self._release_next_settlement()
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.compact()
            return
        self._compaction_pending = True
        loop.call_soon(self._run_scheduled_compaction)

    def _run_scheduled_compaction(self) -> None:
        self._compaction_pending = False
        self.compact()

    def _log_unhandled_error(self, error: BaseException) -> Patch[S]:
        self.log.error("Unhandled error in transaction: %r", error, exc_info=error)
        return _identity


def _identity[S](state: S) -> S:
    return state


def _ensure_patches[S](patches: Patch[S] | Sequence[Patch[S]]) -> tuple[Patch[S], ...]:
    if callable(patches):
        return (patches,)
    return tuple(patches)
