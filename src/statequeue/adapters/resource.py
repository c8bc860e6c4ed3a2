"""Model the lifecycle of an asynchronous load as a tagged state value.

A resource worker writes ``LoadingResource`` first and then exactly one of
``CompleteResource``, ``FailedResource`` (the loader called ``reject``) or
``ThrownResource`` (the loader raised). Whatever a loader returns without
rejecting is its data, ``None`` included. Cancelling the transaction discards
all of them, so the state falls back to whatever it held before the load.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, TypeGuard

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from statequeue.domain.cancellation import CancellationToken
    from statequeue.domain.transaction import TransactionInterface
    from statequeue.domain.types import Patch


@dataclass(slots=True, frozen=True)
class NilResource:
    kind: str


@dataclass(slots=True, frozen=True)
class LoadingResource:
    kind: str
    is_loading: Literal[True] = True


@dataclass(slots=True, frozen=True)
class CompleteResource[T]:
    kind: str
    data: T


@dataclass(slots=True, frozen=True)
class FailedResource[E]:
    kind: str
    error: E


@dataclass(slots=True, frozen=True)
class ThrownResource:
    kind: str
    thrown: BaseException


type Resource[T, E] = (
    NilResource | LoadingResource | CompleteResource[T] | FailedResource[E] | ThrownResource
)


@dataclass(slots=True, frozen=True)
class ResourceInterface[E]:
    """What a loader may do besides returning its data."""

    reject: Callable[[E], None]
    cancellation: CancellationToken


type Loader[T, E] = Callable[[ResourceInterface[E]], Awaitable[T | None]]


def empty_resource(kind: str) -> NilResource:
    return NilResource(kind=kind)


def is_kind(kind: str) -> Callable[[Resource[Any, Any]], bool]:
    def check(resource: Resource[Any, Any]) -> bool:
        return resource.kind == kind

    return check


def is_loading(resource: Resource[Any, Any]) -> TypeGuard[LoadingResource]:
    return isinstance(resource, LoadingResource)


def is_complete[T](resource: Resource[T, Any]) -> TypeGuard[CompleteResource[T]]:
    return isinstance(resource, CompleteResource)


def is_failed[E](resource: Resource[Any, E]) -> TypeGuard[FailedResource[E]]:
    return isinstance(resource, FailedResource)


def is_thrown(resource: Resource[Any, Any]) -> TypeGuard[ThrownResource]:
    return isinstance(resource, ThrownResource)


def get_data[T](resource: Resource[T, Any]) -> T | None:
    return resource.data if isinstance(resource, CompleteResource) else None


def get_graceful_error[E](resource: Resource[Any, E]) -> E | None:
    return resource.error if isinstance(resource, FailedResource) else None


def get_unexpected_error(resource: Resource[Any, Any]) -> BaseException | None:
    return resource.thrown if isinstance(resource, ThrownResource) else None


def resource[T, E](
    kind: str,
    loader: Loader[T, E],
) -> Callable[[TransactionInterface[Resource[T, E]]], Awaitable[None]]:
    """Build a worker that tracks ``loader`` in a ``Resource`` state."""

    async def resource_worker(interface: TransactionInterface[Resource[T, E]]) -> None:
        rejected = False

        def reject(error: E) -> None:
            nonlocal rejected
            rejected = True
            interface.dispatch(_setter(FailedResource(kind=kind, error=error)))

        interface.dispatch(_setter(LoadingResource(kind=kind)))
        try:
            data = await loader(
                ResourceInterface(reject=reject, cancellation=interface.cancellation)
            )
        except Exception as exc:  # noqa: BLE001
            interface.dispatch(_setter(ThrownResource(kind=kind, thrown=exc)))
            return
        if rejected or interface.cancellation.cancelled:
            return
        interface.dispatch(_setter(CompleteResource(kind=kind, data=data)))

    resource_worker.__name__ = f"{kind}_resource"
    return resource_worker


def _setter[T, E](value: Resource[T, E]) -> Patch[Resource[T, E]]:
    def set_resource(_: Resource[T, E]) -> Resource[T, E]:
        return value

    return set_resource
