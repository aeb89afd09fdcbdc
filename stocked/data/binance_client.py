"""Binance spot REST client for tickers, prices and klines."""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from stocked.core.logging import get_logger
from stocked.execution.rate_limiter import WeightRateLimiter
from stocked.models.market import Kline, Ticker

log = get_logger(__name__)

BINANCE_API_URL = "https://api.binance.com"

# Request weights (Binance spot API docs)
_WEIGHT_PRICE = 2
_WEIGHT_KLINES = 2


def _ticker_weight(symbol_count: int) -> int:
    if symbol_count <= 20:
        return 2
    if symbol_count <= 100:
        return 40
    return 80


class BinanceDataError(Exception):
    """Raised when the exchange returns a payload we cannot interpret."""


class BinanceClient:
    """Async REST client for the public Binance market data endpoints."""

    def __init__(
        self,
        base_url: str = BINANCE_API_URL,
        timeout: float = 10.0,
        weight_per_minute: int = 6000,
        rate_limiter: WeightRateLimiter | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._limiter = rate_limiter or WeightRateLimiter(weight_per_minute)
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
            )
        return self._client

    async def _get(self, path: str, params: dict[str, Any], weight: int) -> Any:
        await self._limiter.acquire(weight)
        client = await self._get_client()
        resp = await client.get(path, params=params)
        if resp.status_code != 200:
            log.warning(
                "binance.request_failed",
                path=path,
                status=resp.status_code,
                body=resp.text[:200],
            )
        resp.raise_for_status()
        return resp.json()

    async def get_price(self, symbol: str) -> Decimal:
        """Last trade price for one symbol."""
        data = await self._get(
            "/api/v3/ticker/price", {"symbol": symbol.upper()}, _WEIGHT_PRICE,
        )
        try:
            return Decimal(str(data["price"]))
        except (KeyError, TypeError, InvalidOperation) as exc:
            msg = f"unexpected price payload for {symbol}: {data!r}"
            raise BinanceDataError(msg) from exc

    async def get_tickers(self, symbols: list[str]) -> list[Ticker]:
        """24h ticker statistics for several symbols in one request."""
        wanted = [s.upper() for s in symbols]
        data = await self._get(
            "/api/v3/ticker/24hr",
            {"symbols": json.dumps(wanted, separators=(",", ":"))},
            _ticker_weight(len(wanted)),
        )
        if not isinstance(data, list):
            msg = f"expected a ticker list, got {type(data).__name__}"
            raise BinanceDataError(msg)
        try:
            return [Ticker.from_api(item) for item in data]
        except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
            msg = "malformed 24h ticker payload"
            raise BinanceDataError(msg) from exc

    async def get_klines(
        self,
        symbol: str,
        interval: str = "1m",
        limit: int = 100,
        start_time: int | None = None,
        end_time: int | None = None,
    ) -> list[Kline]:
        """Candlesticks, oldest first.

        Args:
            symbol: Trading pair, e.g. BTCUSDT.
            interval: Kline interval (1m, 5m, ...).
            limit: Maximum number of klines (1-1000).
            start_time: Inclusive start in milliseconds.
            end_time: Inclusive end in milliseconds.
        """
        params: dict[str, Any] = {
            "symbol": symbol.upper(),
            "interval": interval,
            "limit": limit,
        }
        if start_time is not None:
            params["startTime"] = start_time
        if end_time is not None:
            params["endTime"] = end_time

        data = await self._get("/api/v3/klines", params, _WEIGHT_KLINES)
        if not isinstance(data, list):
            msg = f"expected a kline list, got {type(data).__name__}"
            raise BinanceDataError(msg)
        try:
            return [Kline.from_row(symbol.upper(), interval, row) for row in data]
        except (IndexError, TypeError, ValueError, InvalidOperation) as exc:
            msg = f"malformed kline payload for {symbol}"
            raise BinanceDataError(msg) from exc

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
