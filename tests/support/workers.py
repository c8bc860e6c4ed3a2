"""Controllable asynchronous workers for driving transactions from tests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from statequeue import CancellationToken, Store, TransactionInterface
    from statequeue.domain import CancelTransaction, Patch


@dataclass(slots=True)
class AsyncWorkerHandle[S]:
    """A running transaction whose worker only returns once ``done`` is awaited."""

    interface: TransactionInterface[S]
    abort: CancelTransaction
    can_finish: asyncio.Event
    finished: asyncio.Event

    @property
    def cancellation(self) -> CancellationToken:
        return self.interface.cancellation

    def dispatch(self, *patches: Patch[S]) -> None:
        self.interface.dispatch(*patches)

    def replace(self, *patches: Patch[S]) -> None:
        self.interface.replace(*patches)

    async def done(self) -> None:
        self.can_finish.set()
        await self.finished.wait()


async def create_async_worker[S](store: Store[S]) -> AsyncWorkerHandle[S]:
    initialized = asyncio.Event()
    can_finish = asyncio.Event()
    finished = asyncio.Event()
    captured: list[TransactionInterface[S]] = []

    async def async_worker(interface: TransactionInterface[S]) -> None:
        captured.append(interface)
        interface.cancellation.on_cancel(can_finish.set)
        initialized.set()
        await can_finish.wait()
        finished.set()

    abort = store.run(async_worker)
    await initialized.wait()
    return AsyncWorkerHandle(
        interface=captured[0],
        abort=abort,
        can_finish=can_finish,
        finished=finished,
    )


async def until(condition: Callable[[], bool], timeout: float = 1.0) -> None:
    """Yield to the event loop until ``condition`` holds."""

    async with asyncio.timeout(timeout):
        while not condition():
            await asyncio.sleep(0)
