"""Callable shapes shared by the store, its transactions and adapters."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .transaction import TransactionInterface

type Patch[S] = Callable[[S], S]
type Worker[S] = Callable[[TransactionInterface[S]], Awaitable[None] | None]
type Subscriber[S] = Callable[[S], None]
type ErrorHandler[S] = Callable[[BaseException], Patch[S]]
type CancelTransaction = Callable[[], None]
