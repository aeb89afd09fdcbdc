"""Tests for BinanceClient."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from stocked.data.binance_client import BinanceClient, BinanceDataError, _ticker_weight
from stocked.execution.rate_limiter import WeightRateLimiter


def _response(status: int, payload: Any) -> httpx.Response:
    return httpx.Response(
        status,
        json=payload,
        request=httpx.Request("GET", "https://api.binance.com"),
    )


def _client_returning(status: int, payload: Any) -> tuple[BinanceClient, AsyncMock]:
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get = AsyncMock(return_value=_response(status, payload))
    mock_client.is_closed = False
    client = BinanceClient()
    client._client = mock_client
    return client, mock_client


class TestTickerWeight:
    def test_weight_tiers(self) -> None:
        assert _ticker_weight(5) == 2
        assert _ticker_weight(50) == 40
        assert _ticker_weight(200) == 80


class TestGetPrice:
    @pytest.mark.asyncio()
    async def test_success(self) -> None:
        client, mock = _client_returning(200, {"symbol": "BTCUSDT", "price": "50123.45000000"})
        price = await client.get_price("btcusdt")
        assert price == Decimal("50123.45")
        mock.get.assert_awaited_once_with("/api/v3/ticker/price", params={"symbol": "BTCUSDT"})

    @pytest.mark.asyncio()
    async def test_malformed_payload(self) -> None:
        client, _ = _client_returning(200, {"symbol": "BTCUSDT"})
        with pytest.raises(BinanceDataError):
            await client.get_price("BTCUSDT")

    @pytest.mark.asyncio()
    async def test_http_error(self) -> None:
        client, _ = _client_returning(400, {"code": -1121, "msg": "Invalid symbol."})
        with pytest.raises(httpx.HTTPStatusError):
            await client.get_price("NOPEUSDT")


class TestGetTickers:
    @pytest.mark.asyncio()
    async def test_symbols_param_is_compact_json(self) -> None:
        payload = [
            {"symbol": "BTCUSDT", "lastPrice": "50500", "priceChangePercent": "2.5"},
            {"symbol": "ETHUSDT", "lastPrice": "2970", "priceChangePercent": "-1.2"},
        ]
        client, mock = _client_returning(200, payload)
        tickers = await client.get_tickers(["btcusdt", "ETHUSDT"])

        assert [t.symbol for t in tickers] == ["BTCUSDT", "ETHUSDT"]
        assert tickers[1].price_change_percent == Decimal("-1.2")
        params = mock.get.call_args.kwargs["params"]
        assert params["symbols"] == '["BTCUSDT","ETHUSDT"]'
        assert json.loads(params["symbols"]) == ["BTCUSDT", "ETHUSDT"]

    @pytest.mark.asyncio()
    async def test_non_list_payload(self) -> None:
        client, _ = _client_returning(200, {"code": 0})
        with pytest.raises(BinanceDataError, match="ticker list"):
            await client.get_tickers(["BTCUSDT"])

    @pytest.mark.asyncio()
    async def test_malformed_entry(self) -> None:
        client, _ = _client_returning(200, [{"symbol": "BTCUSDT", "lastPrice": "abc"}])
        with pytest.raises(BinanceDataError):
            await client.get_tickers(["BTCUSDT"])


class TestGetKlines:
    ROWS = [
        [1704110400000, "50000", "50100", "49900", "50050", "1.5", 1704110459999],
        [1704110460000, "50050", "50200", "50000", "50150", "2.0", 1704110519999],
    ]

    @pytest.mark.asyncio()
    async def test_parses_rows(self) -> None:
        client, mock = _client_returning(200, self.ROWS)
        klines = await client.get_klines("btcusdt", interval="1m", limit=2)

        assert len(klines) == 2
        assert klines[0].symbol == "BTCUSDT"
        assert klines[-1].close == Decimal("50150")
        params = mock.get.call_args.kwargs["params"]
        assert params == {"symbol": "BTCUSDT", "interval": "1m", "limit": 2}

    @pytest.mark.asyncio()
    async def test_time_range_params(self) -> None:
        client, mock = _client_returning(200, self.ROWS)
        await client.get_klines(
            "BTCUSDT", limit=1000, start_time=1704110400000, end_time=1704110520000,
        )
        params = mock.get.call_args.kwargs["params"]
        assert params["startTime"] == 1704110400000
        assert params["endTime"] == 1704110520000

    @pytest.mark.asyncio()
    async def test_short_row(self) -> None:
        client, _ = _client_returning(200, [[1704110400000, "1"]])
        with pytest.raises(BinanceDataError, match="malformed kline"):
            await client.get_klines("BTCUSDT")


class TestRateLimiting:
    @pytest.mark.asyncio()
    async def test_requests_consume_weight(self) -> None:
        limiter = WeightRateLimiter(weight_per_minute=100)
        client = BinanceClient(rate_limiter=limiter)
        mock_client = AsyncMock(spec=httpx.AsyncClient)
        mock_client.get = AsyncMock(return_value=_response(200, {"price": "1"}))
        mock_client.is_closed = False
        client._client = mock_client

        await client.get_price("BTCUSDT")
        assert limiter.weight_remaining <= 78


class TestClose:
    @pytest.mark.asyncio()
    async def test_close(self) -> None:
        client, mock = _client_returning(200, {})
        await client.close()
        mock.aclose.assert_awaited_once()
        assert client._client is None
