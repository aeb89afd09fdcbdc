"""Fixed-interval async poller with failure backoff."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from typing import Any

from stocked.core.logging import get_logger

log = get_logger(__name__)


class Poller:
    """Run ``fetch`` now and then every ``interval`` seconds until stopped.

    A failing fetch is logged and retried; consecutive failures double the
    wait up to ``max_backoff`` and a success resets it to ``interval``.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[Any]],
        interval: float,
        max_backoff: float = 30.0,
    ) -> None:
        if interval <= 0:
            msg = f"interval must be > 0, got {interval}"
            raise ValueError(msg)
        self._name = name
        self._fetch = fetch
        self._interval = interval
        self._max_backoff = max(max_backoff, interval)
        self._delay = interval
        self._failures = 0
        self._task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def consecutive_failures(self) -> int:
        return self._failures

    @property
    def current_delay(self) -> float:
        return self._delay

    async def start(self, prime: bool = False) -> None:
        """Begin polling; with ``prime`` the first fetch completes before returning."""
        if self._running:
            return
        self._running = True
        if prime:
            await self.poll_once()
        self._task = asyncio.create_task(
            self._loop(sleep_first=prime), name=f"poller:{self._name}",
        )
        log.info("poller.started", poller=self._name, interval_s=self._interval)

    async def stop(self) -> None:
        self._running = False
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        log.info("poller.stopped", poller=self._name)

    async def poll_once(self) -> bool:
        """Run one fetch; returns True on success."""
        try:
            await self._fetch()
        except asyncio.CancelledError:
            raise
        except Exception:
            self._failures += 1
            self._delay = min(self._interval * (2 ** self._failures), self._max_backoff)
            log.warning(
                "poller.fetch_failed",
                poller=self._name,
                failures=self._failures,
                next_delay_s=self._delay,
                exc_info=True,
            )
            return False
        if self._failures:
            log.info("poller.recovered", poller=self._name, failures=self._failures)
        self._failures = 0
        self._delay = self._interval
        return True

    async def _loop(self, sleep_first: bool = False) -> None:
        if sleep_first:
            await asyncio.sleep(self._delay)
        while self._running:
            await self.poll_once()
            await asyncio.sleep(self._delay)

    async def __aenter__(self) -> Poller:
        await self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.stop()
