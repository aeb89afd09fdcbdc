"""Tests for Poller."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from stocked.data.poller import Poller


class TestPollerInit:
    def test_rejects_non_positive_interval(self) -> None:
        with pytest.raises(ValueError, match="interval"):
            Poller("x", AsyncMock(), 0)

    def test_initial_state(self) -> None:
        poller = Poller("x", AsyncMock(), 1.5)
        assert not poller.is_running
        assert poller.consecutive_failures == 0
        assert poller.current_delay == 1.5


class TestPollOnce:
    @pytest.mark.asyncio()
    async def test_success(self) -> None:
        fetch = AsyncMock()
        poller = Poller("x", fetch, 1.0)
        assert await poller.poll_once() is True
        fetch.assert_awaited_once()

    @pytest.mark.asyncio()
    async def test_failure_backs_off(self) -> None:
        poller = Poller("x", AsyncMock(side_effect=RuntimeError("boom")), 1.0, max_backoff=5.0)

        assert await poller.poll_once() is False
        assert poller.consecutive_failures == 1
        assert poller.current_delay == 2.0

        await poller.poll_once()
        assert poller.current_delay == 4.0

        await poller.poll_once()
        assert poller.current_delay == 5.0

    @pytest.mark.asyncio()
    async def test_success_resets_backoff(self) -> None:
        fetch = AsyncMock(side_effect=[RuntimeError("boom"), None])
        poller = Poller("x", fetch, 1.0)
        await poller.poll_once()
        await poller.poll_once()
        assert poller.consecutive_failures == 0
        assert poller.current_delay == 1.0


class TestPollerLifecycle:
    @pytest.mark.asyncio()
    async def test_start_polls_repeatedly(self) -> None:
        fetch = AsyncMock()
        poller = Poller("x", fetch, 0.01)
        await poller.start()
        await asyncio.sleep(0.05)
        await poller.stop()
        assert fetch.await_count >= 2
        assert not poller.is_running

    @pytest.mark.asyncio()
    async def test_prime_fetches_before_returning(self) -> None:
        fetch = AsyncMock()
        poller = Poller("x", fetch, 10.0)
        await poller.start(prime=True)
        assert fetch.await_count == 1
        await poller.stop()

    @pytest.mark.asyncio()
    async def test_start_twice_is_noop(self) -> None:
        fetch = AsyncMock()
        poller = Poller("x", fetch, 10.0)
        await poller.start(prime=True)
        await poller.start(prime=True)
        assert fetch.await_count == 1
        await poller.stop()

    @pytest.mark.asyncio()
    async def test_context_manager(self) -> None:
        async with Poller("x", AsyncMock(), 10.0) as poller:
            assert poller.is_running
        assert not poller.is_running

    @pytest.mark.asyncio()
    async def test_keeps_running_after_failures(self) -> None:
        fetch = AsyncMock(side_effect=RuntimeError("down"))
        poller = Poller("x", fetch, 0.01, max_backoff=0.01)
        await poller.start()
        await asyncio.sleep(0.05)
        assert poller.is_running
        assert fetch.await_count >= 2
        await poller.stop()
