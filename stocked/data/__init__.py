"""Data pipeline: exchange connectivity and polled market views."""

from __future__ import annotations

from stocked.data.binance_client import BinanceClient, BinanceDataError
from stocked.data.market_table import MarketTable
from stocked.data.poller import Poller
from stocked.data.price_feed import PriceFeed

__all__ = [
    "BinanceClient",
    "BinanceDataError",
    "MarketTable",
    "Poller",
    "PriceFeed",
]
