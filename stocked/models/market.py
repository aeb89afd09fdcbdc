"""Market data models: Ticker, Kline, TokenQuote, PricePoint."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, model_validator

QUOTE_ASSET = "USDT"


def pct_change(current: Decimal, reference: Decimal) -> Decimal:
    """Percentage move from ``reference`` to ``current``; 0 when reference is 0."""
    if reference == 0:
        return Decimal("0")
    return (current - reference) / reference * Decimal("100")


def symbol_for(asset: str, quote: str = QUOTE_ASSET) -> str:
    """``btc`` → ``BTCUSDT``."""
    return f"{asset.strip().upper()}{quote.upper()}"


def asset_for(symbol: str, quote: str = QUOTE_ASSET) -> str:
    """``BTCUSDT`` → ``btc``."""
    lowered = symbol.lower()
    suffix = quote.lower()
    if lowered.endswith(suffix):
        lowered = lowered[: -len(suffix)]
    return lowered


class Ticker(BaseModel):
    """24h rolling window statistics reported by the exchange."""

    symbol: str
    last_price: Decimal
    price_change_percent: Decimal
    open_price: Decimal = Decimal("0")
    high_price: Decimal = Decimal("0")
    low_price: Decimal = Decimal("0")
    volume: Decimal = Decimal("0")
    quote_volume: Decimal = Decimal("0")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Ticker:
        return cls(
            symbol=data["symbol"],
            last_price=Decimal(str(data["lastPrice"])),
            price_change_percent=Decimal(str(data["priceChangePercent"])),
            open_price=Decimal(str(data.get("openPrice", "0"))),
            high_price=Decimal(str(data.get("highPrice", "0"))),
            low_price=Decimal(str(data.get("lowPrice", "0"))),
            volume=Decimal(str(data.get("volume", "0"))),
            quote_volume=Decimal(str(data.get("quoteVolume", "0"))),
        )

    model_config = {"frozen": True}


class Kline(BaseModel):
    """OHLCV candlestick for one time bucket."""

    symbol: str
    interval: str
    open_time: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal
    close_time: datetime

    @classmethod
    def from_row(cls, symbol: str, interval: str, row: list[Any]) -> Kline:
        """Build from a REST kline row: [open_time, o, h, l, c, vol, close_time, ...]."""
        return cls(
            symbol=symbol,
            interval=interval,
            open_time=datetime.fromtimestamp(row[0] / 1000, tz=UTC),
            open=Decimal(str(row[1])),
            high=Decimal(str(row[2])),
            low=Decimal(str(row[3])),
            close=Decimal(str(row[4])),
            volume=Decimal(str(row[5])),
            close_time=datetime.fromtimestamp(row[6] / 1000, tz=UTC),
        )

    @model_validator(mode="after")
    def high_gte_low(self) -> Kline:
        if self.high < self.low:
            msg = "high must be >= low"
            raise ValueError(msg)
        return self

    model_config = {"frozen": True}


class TokenQuote(BaseModel):
    """One row of the market table."""

    symbol: str
    name: str
    price: Decimal
    change_24h_pct: Decimal
    change_5m_pct: Decimal

    @property
    def asset(self) -> str:
        return asset_for(self.symbol)

    @property
    def is_up_24h(self) -> bool:
        return self.change_24h_pct > 0

    @property
    def is_up_5m(self) -> bool:
        return self.change_5m_pct > 0

    model_config = {"frozen": True}


class PricePoint(BaseModel):
    """Chart sample: open-time label and close price."""

    time: str
    timestamp: datetime
    price: Decimal

    @classmethod
    def from_kline(cls, kline: Kline) -> PricePoint:
        return cls(
            time=kline.open_time.strftime("%H:%M:%S"),
            timestamp=kline.open_time,
            price=kline.close,
        )

    model_config = {"frozen": True}
