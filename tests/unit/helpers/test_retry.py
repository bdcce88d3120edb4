"""Test retry decorator."""

from unittest.mock import AsyncMock, patch

import pytest
from aiohttp import ClientConnectionError

from remscontent.helpers.retry import retry


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("remscontent.helpers.retry.asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep


async def test_retry_succeeds_after_failures(no_sleep):
    calls = AsyncMock(side_effect=[ClientConnectionError(), ClientConnectionError(), "ok"])

    @retry(total_tries=3, initial_wait=1, backoff_factor=2)
    async def call():
        return await calls()

    assert await call() == "ok"
    assert calls.await_count == 3
    assert [c.args[0] for c in no_sleep.await_args_list] == [1, 2]


async def test_retry_gives_up():
    calls = AsyncMock(side_effect=ClientConnectionError())

    @retry(total_tries=4)
    async def call():
        return await calls()

    with pytest.raises(ClientConnectionError):
        await call()
    assert calls.await_count == 4


async def test_retry_ignores_other_exceptions(no_sleep):
    calls = AsyncMock(side_effect=ValueError("invalid"))

    @retry(exceptions=(ClientConnectionError,))
    async def call():
        return await calls()

    with pytest.raises(ValueError):
        await call()
    assert calls.await_count == 1
    no_sleep.assert_not_awaited()
