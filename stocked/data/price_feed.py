"""Per-token trade view data: live price and 1m close-price chart."""

from __future__ import annotations

from decimal import Decimal

from stocked.core.logging import get_logger
from stocked.data.poller import Poller
from stocked.interfaces import MarketDataSource
from stocked.models.market import PricePoint, symbol_for

log = get_logger(__name__)


class PriceFeed:
    """Current price and chart series for one asset (``btc`` → BTCUSDT).

    Price and chart are polled independently; the chart's last close also
    refreshes the current price. Failed polls keep the previous values.
    """

    def __init__(
        self,
        client: MarketDataSource,
        asset: str,
        chart_interval: str = "1m",
        chart_limit: int = 100,
        price_seconds: float = 1.0,
        chart_seconds: float = 1.0,
        max_backoff: float = 30.0,
        quote_asset: str = "USDT",
    ) -> None:
        if not asset.strip():
            msg = "asset must not be empty"
            raise ValueError(msg)
        self._client = client
        self._asset = asset.strip().lower()
        self._symbol = symbol_for(self._asset, quote_asset)
        self._chart_interval = chart_interval
        self._chart_limit = chart_limit
        self._current_price: Decimal | None = None
        self._chart: list[PricePoint] = []
        self._pollers = [
            Poller(f"price:{self._symbol}", self.refresh_price, price_seconds, max_backoff),
            Poller(f"chart:{self._symbol}", self.refresh_chart, chart_seconds, max_backoff),
        ]

    @property
    def asset(self) -> str:
        return self._asset

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def current_price(self) -> Decimal | None:
        return self._current_price

    @property
    def chart(self) -> list[PricePoint]:
        return list(self._chart)

    @property
    def is_running(self) -> bool:
        return any(p.is_running for p in self._pollers)

    async def refresh_price(self) -> Decimal:
        price = await self._client.get_price(self._symbol)
        self._current_price = price
        return price

    async def refresh_chart(self) -> list[PricePoint]:
        klines = await self._client.get_klines(
            self._symbol, interval=self._chart_interval, limit=self._chart_limit,
        )
        if not klines:
            log.warning("price_feed.empty_chart", symbol=self._symbol)
            return self.chart
        self._chart = [PricePoint.from_kline(k) for k in klines]
        self._current_price = self._chart[-1].price
        return self.chart

    async def start(self) -> None:
        for poller in self._pollers:
            await poller.start(prime=True)

    async def stop(self) -> None:
        for poller in self._pollers:
            await poller.stop()
