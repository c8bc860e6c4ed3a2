"""Transaction state machine.

A transaction is one unit of patch-producing work. Synchronous transactions
are created already ``completed``; asynchronous ones start ``pending``, run a
worker on the event loop and end ``completed``, ``aborted`` or ``thrown``.
Every state change goes through ``Transaction._transition`` which refuses to
leave a terminal state.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from enum import StrEnum
from logging import Logger, getLogger
from typing import TYPE_CHECKING, Final

from .cancellation import CancellationToken
from .errors import NoEventLoopError
from .settlement import Settlement

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from .types import CancelTransaction, Patch, Worker

log = getLogger(__name__)


class TransactionState(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"
    THROWN = "thrown"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES: Final[frozenset[TransactionState]] = frozenset(
    {TransactionState.COMPLETED, TransactionState.ABORTED, TransactionState.THROWN}
)

_TRANSITIONS: Final[dict[TransactionState, frozenset[TransactionState]]] = {
    TransactionState.PENDING: frozenset({TransactionState.RUNNING, TransactionState.ABORTED}),
    TransactionState.RUNNING: frozenset(
        {TransactionState.COMPLETED, TransactionState.ABORTED, TransactionState.THROWN}
    ),
}

_STALE_UPDATE_MESSAGES: Final[dict[TransactionState, str]] = {
    TransactionState.PENDING: "Tried to update the state of a transaction that has not started.",
    TransactionState.COMPLETED: (
        "Tried to update the state of a completed transaction. Did the worker return "
        "before all of its callbacks and awaitables finished?"
    ),
    TransactionState.ABORTED: "Tried to update the state of an aborted transaction.",
    TransactionState.THROWN: (
        "Tried to update the state of a transaction which has thrown an error earlier."
    ),
}


@dataclass(slots=True, frozen=True)
class TransactionInterface[S]:
    """The capabilities a worker gets over its own transaction."""

    dispatch: Callable[..., None]
    replace: Callable[..., None]
    cancellation: CancellationToken
    settlement: Settlement[S]


class Transaction[S]:
    __slots__ = (
        "_log",
        "_task",
        "cancellation",
        "error",
        "name",
        "patches",
        "settlement",
        "state",
    )

    def __init__(
        self,
        *,
        name: str | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.state = TransactionState.PENDING
        self.patches: list[Patch[S]] = []
        self.error: BaseException | None = None
        self.name = name
        self.settlement: Settlement[S] = Settlement()
        self.cancellation = CancellationToken()
        self._task: asyncio.Task[None] | None = None
        self._log = logger or log

    @classmethod
    def completed(
        cls, patches: Iterable[Patch[S]] = (), *, logger: Logger | None = None
    ) -> Transaction[S]:
        """Build a synchronous transaction that is already ``completed``."""

        transaction: Transaction[S] = cls(name="patch", logger=logger)
        transaction.patches = list(patches)
        transaction.state = TransactionState.COMPLETED
        return transaction

    def __repr__(self) -> str:
        return (
            f"Transaction(name={self.name!r}, state={self.state.value}, "
            f"patches={len(self.patches)})"
        )

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    def has_settled(self) -> bool:
        return self.state.is_terminal

    def reduce(self, state: S) -> S:
        for patch in self.patches:
            state = patch(state)
        return state

    def cancel(self) -> None:
        if not self.state.is_terminal:
            self.cancellation.cancel()

    def run(
        self,
        worker: Worker[S],
        on_update: Callable[[], None],
        on_settled: Callable[[], None],
    ) -> CancelTransaction:
        """Schedule ``worker`` on the running loop and return the cancel function.

        ``on_update`` is called after every patch-log change and after the
        ``aborted`` and ``thrown`` transitions; ``on_settled`` whenever the
        transaction may have become compactable.
        """

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise NoEventLoopError(
                "Asynchronous transactions need a running event loop"
            ) from exc

        self.name = _worker_name(worker)
        self.cancellation.on_cancel(lambda: self._abort(on_update, on_settled))
        interface: TransactionInterface[S] = TransactionInterface(
            dispatch=self._updater(self._append, on_update),
            replace=self._updater(self._reset, on_update),
            cancellation=self.cancellation,
            settlement=self.settlement,
        )
        self._task = loop.create_task(
            self._execute(worker, interface, on_update, on_settled),
            name=f"statequeue-transaction:{self.name}",
        )
        return self.cancel

    async def _execute(
        self,
        worker: Worker[S],
        interface: TransactionInterface[S],
        on_update: Callable[[], None],
        on_settled: Callable[[], None],
    ) -> None:
        if not self._transition(TransactionState.RUNNING):
            # cancelled before the worker got its turn
            return

        try:
            result = worker(interface)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            # task cancellation counts as the worker cancelling itself
            self.cancellation.cancel()
            raise
        except Exception as exc:  # noqa: BLE001
            if self._transition(TransactionState.THROWN, error=exc):
                on_update()
            else:
                self._log.debug(
                    "Ignoring error raised by %s transaction %r: %r", self.state, self.name, exc
                )
        else:
            self._transition(TransactionState.COMPLETED)
        on_settled()

    def _abort(self, on_update: Callable[[], None], on_settled: Callable[[], None]) -> None:
        if self._transition(TransactionState.ABORTED):
            on_update()
            on_settled()

    def _transition(self, target: TransactionState, *, error: BaseException | None = None) -> bool:
        if target not in _TRANSITIONS.get(self.state, frozenset()):
            return False
        self.state = target
        if target is TransactionState.THROWN:
            self.error = error
        return True

    def _updater(
        self,
        mutate: Callable[[Sequence[Patch[S]]], None],
        on_update: Callable[[], None],
    ) -> Callable[..., None]:
        def update(*patches: Patch[S]) -> None:
            if self.state is not TransactionState.RUNNING:
                self._report_stale_update()
                return
            mutate(patches)
            on_update()

        return update

    def _append(self, patches: Sequence[Patch[S]]) -> None:
        self.patches.extend(patches)

    def _reset(self, patches: Sequence[Patch[S]]) -> None:
        self.patches = list(patches)

    def _report_stale_update(self) -> None:
        message = _STALE_UPDATE_MESSAGES[self.state]
        if self.state is TransactionState.ABORTED:
            # racing a cancellation is expected
            self._log.debug("%s (transaction %r)", message, self.name)
        else:
            self._log.warning("%s (transaction %r)", message, self.name)


def _worker_name(worker: object) -> str:
    name = getattr(worker, "__name__", None)
    if not name or name == "<lambda>":
        return "anonymous"
    return name
