"""Market overview table: price, 24h change and 5m change per token."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from stocked.core.logging import get_logger
from stocked.data.binance_client import BinanceDataError
from stocked.data.poller import Poller
from stocked.interfaces import MarketDataSource
from stocked.models.market import Kline, Ticker, TokenQuote, pct_change

log = get_logger(__name__)


def build_quotes(
    tickers: list[Ticker],
    opens: dict[str, Kline],
    names: dict[str, str],
) -> list[TokenQuote]:
    """Join 24h tickers with the latest 5m kline of each symbol.

    Tickers keep the exchange's order. A ticker without a matching kline
    raises BinanceDataError.
    """
    quotes: list[TokenQuote] = []
    for ticker in tickers:
        kline = opens.get(ticker.symbol)
        if kline is None:
            msg = f"no 5m kline for {ticker.symbol}"
            raise BinanceDataError(msg)
        quotes.append(
            TokenQuote(
                symbol=ticker.symbol,
                name=names.get(ticker.symbol, ""),
                price=ticker.last_price,
                change_24h_pct=ticker.price_change_percent,
                change_5m_pct=pct_change(ticker.last_price, kline.open),
            )
        )
    return quotes


class MarketTable:
    """Snapshot of the tracked tokens, refreshed on a fixed interval."""

    def __init__(
        self,
        client: MarketDataSource,
        symbols: list[str],
        names: dict[str, str],
        change_interval: str = "5m",
        poll_interval: float = 2.0,
        max_backoff: float = 30.0,
    ) -> None:
        self._client = client
        self._symbols = [s.upper() for s in symbols]
        self._names = {k.upper(): v for k, v in names.items()}
        self._change_interval = change_interval
        self._quotes: list[TokenQuote] = []
        self._loading = True
        self._updated_at: datetime | None = None
        self._poller = Poller("market_table", self.refresh_safely, poll_interval, max_backoff)

    @property
    def symbols(self) -> list[str]:
        return list(self._symbols)

    @property
    def quotes(self) -> list[TokenQuote]:
        return list(self._quotes)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def updated_at(self) -> datetime | None:
        return self._updated_at

    def quote(self, symbol: str) -> TokenQuote | None:
        wanted = symbol.upper()
        return next((q for q in self._quotes if q.symbol == wanted), None)

    async def refresh(self) -> list[TokenQuote]:
        """Fetch tickers and the current 5m klines concurrently and rebuild."""
        tickers, klines = await asyncio.gather(
            self._client.get_tickers(self._symbols),
            asyncio.gather(
                *(
                    self._client.get_klines(s, interval=self._change_interval, limit=1)
                    for s in self._symbols
                )
            ),
        )
        opens: dict[str, Kline] = {}
        for symbol, rows in zip(self._symbols, klines):
            if rows:
                opens[symbol] = rows[-1]

        self._quotes = build_quotes(tickers, opens, self._names)
        self._updated_at = datetime.now(tz=UTC)
        self._loading = False
        log.debug("market_table.refreshed", count=len(self._quotes))
        return self.quotes

    async def refresh_safely(self) -> None:
        """Refresh for the poller: leaves the loading state even on failure."""
        try:
            await self.refresh()
        finally:
            self._loading = False

    async def start(self) -> None:
        await self._poller.start(prime=True)

    async def stop(self) -> None:
        await self._poller.stop()
