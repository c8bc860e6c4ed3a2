from __future__ import annotations

import asyncio

import pytest

from statequeue import CancellationToken, Settlement
from statequeue.domain import TransactionAbortedError


def test_resolves_exactly_once() -> None:
    settlement: Settlement[str] = Settlement()

    assert settlement.resolve("first")
    assert not settlement.resolve("second")
    assert settlement.value() == "first"


def test_value_before_resolution_raises() -> None:
    settlement: Settlement[int] = Settlement()

    assert not settlement.resolved
    with pytest.raises(LookupError):
        settlement.value()


def test_map_derives_value_before_and_after_resolution() -> None:
    settlement: Settlement[dict[str, int]] = Settlement()
    early = settlement.map(lambda state: state["count"])

    settlement.resolve({"count": 3})
    late = settlement.map(lambda state: state["count"] * 2)

    assert early.value() == 3
    assert late.value() == 6


def test_waiters_receive_the_resolved_value() -> None:
    async def scenario() -> list[int]:
        settlement: Settlement[int] = Settlement()
        waiters = [asyncio.ensure_future(settlement.wait()) for _ in range(2)]
        await asyncio.sleep(0)
        settlement.resolve(42)
        return list(await asyncio.gather(*waiters))

    assert asyncio.run(scenario()) == [42, 42]


def test_settlement_is_awaitable() -> None:
    async def scenario() -> int:
        settlement: Settlement[int] = Settlement()
        settlement.resolve(7)
        return await settlement

    assert asyncio.run(scenario()) == 7


def test_wait_raises_when_token_fires_first() -> None:
    async def scenario() -> None:
        settlement: Settlement[int] = Settlement()
        token = CancellationToken()
        waiter = asyncio.ensure_future(settlement.wait(token))
        await asyncio.sleep(0)
        token.cancel()
        with pytest.raises(TransactionAbortedError):
            await waiter

    asyncio.run(scenario())


def test_wait_with_cancelled_token_fails_fast() -> None:
    async def scenario() -> None:
        settlement: Settlement[int] = Settlement()
        token = CancellationToken()
        token.cancel()
        with pytest.raises(TransactionAbortedError):
            await settlement.wait(token)

    asyncio.run(scenario())
