"""Tests for PriceFeed."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from stocked.data.binance_client import BinanceDataError
from stocked.data.price_feed import PriceFeed


class TestPriceFeed:
    def test_symbol_from_asset(self, fake_binance: AsyncMock) -> None:
        feed = PriceFeed(fake_binance, " BTC ")
        assert feed.asset == "btc"
        assert feed.symbol == "BTCUSDT"
        assert feed.current_price is None
        assert feed.chart == []

    def test_empty_asset_rejected(self, fake_binance: AsyncMock) -> None:
        with pytest.raises(ValueError, match="asset"):
            PriceFeed(fake_binance, "")

    @pytest.mark.asyncio()
    async def test_refresh_price(self, fake_binance: AsyncMock) -> None:
        feed = PriceFeed(fake_binance, "btc")
        assert await feed.refresh_price() == Decimal("50123.45")
        assert feed.current_price == Decimal("50123.45")
        fake_binance.get_price.assert_awaited_once_with("BTCUSDT")

    @pytest.mark.asyncio()
    async def test_refresh_chart(self, fake_binance: AsyncMock) -> None:
        feed = PriceFeed(fake_binance, "btc", chart_limit=50)
        chart = await feed.refresh_chart()

        assert [p.price for p in chart] == [Decimal("50000"), Decimal("50001"), Decimal("50002")]
        assert chart[0].time == "12:00:00"
        assert feed.current_price == Decimal("50002")
        fake_binance.get_klines.assert_awaited_once_with("BTCUSDT", interval="1m", limit=50)

    @pytest.mark.asyncio()
    async def test_empty_chart_keeps_previous(self, fake_binance: AsyncMock) -> None:
        feed = PriceFeed(fake_binance, "btc")
        await feed.refresh_chart()
        fake_binance.get_klines.side_effect = None
        fake_binance.get_klines.return_value = []

        chart = await feed.refresh_chart()
        assert len(chart) == 3

    @pytest.mark.asyncio()
    async def test_start_primes_and_stop(self, fake_binance: AsyncMock) -> None:
        feed = PriceFeed(fake_binance, "btc", price_seconds=60, chart_seconds=60)
        await feed.start()
        try:
            assert feed.is_running
            assert feed.current_price is not None
            assert len(feed.chart) == 3
        finally:
            await feed.stop()
        assert not feed.is_running

    @pytest.mark.asyncio()
    async def test_failing_source_keeps_last_price(self, fake_binance: AsyncMock) -> None:
        feed = PriceFeed(fake_binance, "btc")
        await feed.refresh_price()
        fake_binance.get_price.side_effect = BinanceDataError("down")
        with pytest.raises(BinanceDataError):
            await feed.refresh_price()
        assert feed.current_price == Decimal("50123.45")
