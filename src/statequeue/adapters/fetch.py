"""HTTP flavour of the resource worker."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final, Unpack

from pydantic import TypeAdapter

from .http import HttpClient
from .resource import NilResource, empty_resource, resource

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    import httpx
    from httpx._types import URLTypes

    from statequeue.config.http import HttpConfig

    from .http import RequestOptions
    from .resource import Resource, ResourceInterface

    type ResponseResolver[T] = Callable[[httpx.Response], Awaitable[T]]

log = getLogger(__name__)

FETCH_KIND: Final[str] = "fetch"


@dataclass(slots=True, frozen=True)
class FetchError[E]:
    status: int
    status_text: str
    response: E


type FetchResource[T, E] = Resource[T, FetchError[E]]


empty_fetch_resource: Final[NilResource] = empty_resource(FETCH_KIND)


async def json_resolver(response: httpx.Response) -> Any:
    return response.json()


async def text_resolver(response: httpx.Response) -> str:
    return response.text


def model_resolver[T](model: type[T]) -> ResponseResolver[T]:
    """Validate the JSON body against ``model`` (any type pydantic accepts)."""

    adapter = TypeAdapter(model)

    async def resolve(response: httpx.Response) -> T:
        return adapter.validate_json(response.content)

    return resolve


def fetch_resource[T, E](
    url: URLTypes,
    *,
    method: str = "GET",
    client: HttpClient | None = None,
    config: HttpConfig | None = None,
    response_resolver: ResponseResolver[T] = json_resolver,
    error_resolver: ResponseResolver[E] = json_resolver,
    **options: Unpack[RequestOptions],
) -> Callable[[Any], Awaitable[None]]:
    """Build a worker loading ``url`` into a ``Resource[T, FetchError[E]]`` state.

    Non-2xx responses reject with a ``FetchError``; transport errors end up as
    ``ThrownResource``. Cancelling the transaction cancels the in-flight
    request. Without ``client`` a fresh ``HttpClient`` is opened per load.
    """

    async def load(interface: ResourceInterface[FetchError[E]]) -> T | None:
        if client is not None:
            return await _load(client, interface)
        async with HttpClient(config) as own_client:
            return await _load(own_client, interface)

    async def _load(
        http: HttpClient, interface: ResourceInterface[FetchError[E]]
    ) -> T | None:
        request = asyncio.ensure_future(http.request(method, url, **options))
        remove = interface.cancellation.on_cancel(request.cancel)
        try:
            response = await request
        except asyncio.CancelledError:
            if interface.cancellation.cancelled:
                log.debug("Fetch of %s cancelled", url)
                return None
            raise
        finally:
            remove()

        if response.is_success:
            return await response_resolver(response)
        log.info("Fetch of %s failed with status %s", url, response.status_code)
        interface.reject(
            FetchError(
                status=response.status_code,
                status_text=response.reason_phrase,
                response=await error_resolver(response),
            )
        )
        return None

    worker: Callable[[Any], Awaitable[None]] = resource(FETCH_KIND, load)
    return worker

