"""Pure folding and compaction over an ordered transaction queue.

The derived state of a store is always ``fold(base, queue)``. Compaction moves
the longest leading run of settled transactions into the base state; it stops
at the first pending or running transaction even when later ones have already
settled, so queue order alone decides what may be folded.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import takewhile
from typing import TYPE_CHECKING

from .transaction import Transaction, TransactionState

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .types import ErrorHandler


@dataclass(slots=True, frozen=True)
class CompactionResult[S]:
    base_state: S
    queue: list[Transaction[S]]
    compacted: tuple[Transaction[S], ...]

    @property
    def head(self) -> Transaction[S] | None:
        return self.queue[0] if self.queue else None


def fold_step[S](state: S, transaction: Transaction[S], error_handler: ErrorHandler[S]) -> S:
    """Apply one transaction's current contribution to ``state``."""

    match transaction.state:
        case TransactionState.RUNNING | TransactionState.COMPLETED:
            return transaction.reduce(state)
        case TransactionState.THROWN:
            error = transaction.error
            if error is None:
                return state
            return error_handler(error)(state)
        case _:
            return state


def fold[S](state: S, transactions: Iterable[Transaction[S]], error_handler: ErrorHandler[S]) -> S:
    for transaction in transactions:
        state = fold_step(state, transaction, error_handler)
    return state


def split_settled_prefix[S](
    queue: Sequence[Transaction[S]],
) -> tuple[list[Transaction[S]], list[Transaction[S]]]:
    """Split ``queue`` before its first transaction that has not settled."""

    prefix = list(takewhile(lambda transaction: transaction.has_settled(), queue))
    return prefix, list(queue[len(prefix) :])


def compact[S](
    base_state: S,
    queue: Sequence[Transaction[S]],
    error_handler: ErrorHandler[S],
) -> CompactionResult[S]:
    """Fold the settled prefix of ``queue`` into ``base_state``.

    Calling it again on its own result returns an equal result.
    """

    prefix, rest = split_settled_prefix(queue)
    return CompactionResult(
        base_state=fold(base_state, prefix, error_handler),
        queue=rest,
        compacted=tuple(prefix),
    )
