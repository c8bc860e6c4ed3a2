from __future__ import annotations

from typing import TYPE_CHECKING

from statequeue import Transaction, TransactionState
from statequeue.domain import compact, fold, fold_step, split_settled_prefix
from tests.support.stores import add

if TYPE_CHECKING:
    from statequeue.domain import Patch


def _identity_handler(_: BaseException) -> Patch[int]:
    return lambda state: state


def _transaction(state: TransactionState, *patches: Patch[int]) -> Transaction[int]:
    transaction: Transaction[int] = Transaction()
    transaction.patches = list(patches)
    transaction.state = state
    return transaction


def test_fold_step_per_state() -> None:
    assert fold_step(1, _transaction(TransactionState.RUNNING, add(2)), _identity_handler) == 3
    assert fold_step(1, _transaction(TransactionState.COMPLETED, add(2)), _identity_handler) == 3
    assert fold_step(1, _transaction(TransactionState.PENDING, add(2)), _identity_handler) == 1
    assert fold_step(1, _transaction(TransactionState.ABORTED, add(2)), _identity_handler) == 1


def test_fold_step_routes_thrown_transactions_through_error_handler() -> None:
    failed = _transaction(TransactionState.THROWN, add(100))
    failed.error = KeyError("missing")
    seen: list[BaseException] = []

    def handler(error: BaseException) -> Patch[int]:
        seen.append(error)
        return lambda state: -state

    assert fold_step(4, failed, handler) == -4
    assert seen == [failed.error]


def test_split_stops_at_first_unsettled_transaction() -> None:
    done = Transaction.completed([add(1)])
    running = _transaction(TransactionState.RUNNING, add(10))
    later_done = Transaction.completed([add(100)])

    prefix, rest = split_settled_prefix([done, running, later_done])

    assert prefix == [done]
    assert rest == [running, later_done]


def test_compact_keeps_later_terminal_transactions_queued() -> None:
    queue = [
        Transaction.completed([add(1)]),
        _transaction(TransactionState.ABORTED, add(1000)),
        _transaction(TransactionState.PENDING),
        Transaction.completed([add(100)]),
    ]

    result = compact(0, queue, _identity_handler)

    assert result.base_state == 1
    assert result.queue == queue[2:]
    assert result.head is queue[2]
    assert result.compacted == tuple(queue[:2])


def test_compact_is_idempotent() -> None:
    queue = [Transaction.completed([add(1)]), _transaction(TransactionState.RUNNING, add(2))]

    first = compact(0, queue, _identity_handler)
    second = compact(first.base_state, first.queue, _identity_handler)

    assert second.base_state == first.base_state
    assert second.queue == first.queue
    assert second.compacted == ()


def test_compaction_preserves_derived_state() -> None:
    queue = [
        Transaction.completed([add(1)]),
        _transaction(TransactionState.RUNNING, add(10)),
        Transaction.completed([add(100)]),
    ]

    result = compact(0, queue, _identity_handler)

    assert fold(result.base_state, result.queue, _identity_handler) == fold(
        0, queue, _identity_handler
    )
