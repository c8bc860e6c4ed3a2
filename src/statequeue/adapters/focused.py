"""Narrow a worker to one part of the store state."""

from __future__ import annotations

from functools import wraps
from typing import TYPE_CHECKING

from statequeue.domain.transaction import TransactionInterface

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from statequeue.domain.types import Patch, Worker


def focused[S, V](
    get: Callable[[S], V],
    set_: Callable[[V], Patch[S]],
    worker: Worker[V],
) -> Worker[S]:
    """Run ``worker`` against the value selected by ``get``.

    Patches the worker dispatches operate on the focused value and are written
    back with ``set_``; its settlement resolves with the focused part of the
    settled state. The transaction itself still belongs to the whole store.
    """

    lift = _lifter(get, set_)

    @wraps(worker)
    def focused_worker(interface: TransactionInterface[S]) -> Awaitable[None] | None:
        def dispatch(*patches: Patch[V]) -> None:
            interface.dispatch(*map(lift, patches))

        def replace(*patches: Patch[V]) -> None:
            interface.replace(*map(lift, patches))

        return worker(
            TransactionInterface(
                dispatch=dispatch,
                replace=replace,
                cancellation=interface.cancellation,
                settlement=interface.settlement.map(get),
            )
        )

    return focused_worker


def _lifter[S, V](
    get: Callable[[S], V],
    set_: Callable[[V], Patch[S]],
) -> Callable[[Patch[V]], Patch[S]]:
    def lift(patch: Patch[V]) -> Patch[S]:
        def lifted(state: S) -> S:
            return set_(patch(get(state)))(state)

        return lifted

    return lift
