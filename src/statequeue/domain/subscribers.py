"""Ordered registry of state subscribers."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .types import Subscriber


class SubscriberList[S]:
    """Callbacks invoked, in subscription order, with every new state.

    States emitted while a notification round is running (a subscriber
    dispatching back into the store, for example) are queued and delivered
    once the current round has reached every subscriber.
    """

    __slots__ = ("_emitting", "_pending", "_subscribers")

    def __init__(self) -> None:
        self._subscribers: list[Subscriber[S]] = []
        self._pending: deque[S] = deque()
        self._emitting = False

    def __len__(self) -> int:
        return len(self._subscribers)

    def __iter__(self) -> Iterator[Subscriber[S]]:
        return iter(tuple(self._subscribers))

    def __contains__(self, subscriber: object) -> bool:
        return subscriber in self._subscribers

    def push(self, subscriber: Subscriber[S]) -> None:
        self._subscribers.append(subscriber)

    def remove(self, subscriber: Subscriber[S]) -> None:
        try:
            self._subscribers.remove(subscriber)
        except ValueError:
            return

    def emit(self, state: S) -> None:
        self._pending.append(state)
        if self._emitting:
            return
        self._emitting = True
        try:
            while self._pending:
                current = self._pending.popleft()
                for subscriber in tuple(self._subscribers):
                    subscriber(current)
        finally:
            self._pending.clear()
            self._emitting = False
