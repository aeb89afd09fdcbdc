"""Request-weight budget for Binance REST calls."""

from __future__ import annotations

import asyncio
import time

from stocked.core.logging import get_logger

logger = get_logger(__name__)

_SAFETY_MARGIN = 0.8
_MAX_SLEEP = 1.0


class WeightRateLimiter:
    """Binance charges each endpoint a request weight against a per-minute cap.

    The usable budget is 80% of ``weight_per_minute`` and refills
    continuously over the minute. Calls are serialised by an asyncio.Lock.
    """

    def __init__(self, weight_per_minute: int) -> None:
        self._capacity = float(int(weight_per_minute * _SAFETY_MARGIN))
        self._per_second = self._capacity / 60.0
        self._available = self._capacity
        self._stamp = time.monotonic()
        self._lock = asyncio.Lock()

    @property
    def weight_remaining(self) -> int:
        self._top_up()
        return int(self._available)

    async def try_acquire(self, weight: int = 1) -> bool:
        async with self._lock:
            return self._take(weight)

    async def acquire(self, weight: int = 1) -> None:
        """Block until ``weight`` fits in the budget, then spend it.

        Raises:
            ValueError: If ``weight`` can never fit.
        """
        if weight > self._capacity:
            msg = f"weight {weight} exceeds budget {int(self._capacity)}"
            raise ValueError(msg)
        while True:
            async with self._lock:
                if self._take(weight):
                    return
                shortfall = weight - self._available
            delay = shortfall / self._per_second if self._per_second > 0 else 0.1
            logger.debug("rate_limiter.waiting", weight=weight, wait_s=round(delay, 3))
            await asyncio.sleep(min(delay, _MAX_SLEEP))

    def _take(self, weight: int) -> bool:
        self._top_up()
        if self._available < weight:
            return False
        self._available -= weight
        return True

    def _top_up(self) -> None:
        now = time.monotonic()
        self._available = min(
            self._capacity, self._available + (now - self._stamp) * self._per_second,
        )
        self._stamp = now
