"""Single-resolution future marking a transaction's causal barrier."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, cast

from .errors import TransactionAbortedError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .cancellation import CancellationToken


class Settlement[S]:
    """Resolves once, with the base state in front of its transaction.

    The store resolves it once every transaction queued earlier has settled.
    A settlement whose transaction is aborted before that point is never
    resolved, so waiters should pass their cancellation token to ``wait``.

    Unlike ``asyncio.Future`` the settlement is not bound to an event loop:
    synchronous transactions created outside a loop own one too.
    """

    __slots__ = ("_callbacks", "_resolved", "_value", "_waiters")

    def __init__(self) -> None:
        self._resolved = False
        self._value: S | None = None
        self._waiters: list[asyncio.Future[S]] = []
        self._callbacks: list[Callable[[S], None]] = []

    def __repr__(self) -> str:
        if self._resolved:
            return f"Settlement(resolved={self._value!r})"
        return "Settlement(pending)"

    @property
    def resolved(self) -> bool:
        return self._resolved

    def value(self) -> S:
        """Return the resolved value; raise ``LookupError`` while unresolved."""

        if not self._resolved:
            raise LookupError("Settlement has not been resolved")
        return cast("S", self._value)

    def resolve(self, value: S) -> bool:
        """Resolve with ``value``; later calls are ignored and return ``False``."""

        if self._resolved:
            return False
        self._resolved = True
        self._value = value
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(value)
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(value)
        return True

    def map[V](self, fn: Callable[[S], V]) -> Settlement[V]:
        """Return a settlement resolved with ``fn(value)`` once this one resolves."""

        derived: Settlement[V] = Settlement()
        if self._resolved:
            derived.resolve(fn(cast("S", self._value)))
        else:
            self._callbacks.append(lambda value: derived.resolve(fn(value)))
        return derived

    async def wait(self, token: CancellationToken | None = None) -> S:
        """Await the resolved value.

        With ``token`` the wait is raced against cancellation and raises
        ``TransactionAbortedError`` if the token fires first.
        """

        if self._resolved:
            return cast("S", self._value)
        if token is not None and token.cancelled:
            raise TransactionAbortedError("Transaction was aborted before it settled")

        waiter: asyncio.Future[S] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)

        def on_cancel() -> None:
            if not waiter.done():
                waiter.set_exception(
                    TransactionAbortedError("Transaction was aborted before it settled")
                )

        remove = token.on_cancel(on_cancel) if token is not None else None
        try:
            return await waiter
        finally:
            if remove is not None:
                remove()
            if waiter in self._waiters:
                self._waiters.remove(waiter)

    def __await__(self):  # noqa: ANN204
        return self.wait().__await__()
