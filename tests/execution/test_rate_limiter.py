"""Tests for WeightRateLimiter: budget, margin, exhaustion, refill."""

from __future__ import annotations

import asyncio

import pytest

from stocked.execution.rate_limiter import WeightRateLimiter


def test_safety_margin() -> None:
    limiter = WeightRateLimiter(weight_per_minute=100)
    assert limiter.weight_remaining == 80


@pytest.mark.asyncio
async def test_try_acquire_deducts_weight() -> None:
    limiter = WeightRateLimiter(weight_per_minute=6000)
    assert await limiter.try_acquire(40) is True
    assert limiter.weight_remaining in (4760, 4761)


@pytest.mark.asyncio
async def test_try_acquire_exhaustion() -> None:
    limiter = WeightRateLimiter(weight_per_minute=10)
    assert await limiter.try_acquire(8) is True
    assert await limiter.try_acquire(8) is False


@pytest.mark.asyncio
async def test_acquire_waits_for_refill() -> None:
    # 6000 * 0.8 / 60 = 80 weight per second
    limiter = WeightRateLimiter(weight_per_minute=6000)
    assert await limiter.try_acquire(4800) is True
    await asyncio.wait_for(limiter.acquire(4), timeout=1.0)


@pytest.mark.asyncio
async def test_acquire_over_capacity_raises() -> None:
    limiter = WeightRateLimiter(weight_per_minute=10)
    with pytest.raises(ValueError, match="exceeds budget"):
        await limiter.acquire(9)
