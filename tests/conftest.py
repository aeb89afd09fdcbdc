"""Shared test fixtures."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from collections.abc import Callable
from decimal import Decimal
from pathlib import Path  # noqa: TCH003
from unittest.mock import AsyncMock

import pytest

from stocked.config.loader import ConfigLoader
from stocked.data.binance_client import BinanceClient
from stocked.models.bet import Bet, BetDirection
from stocked.models.market import Kline, Ticker

TEST_USER = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


@pytest.fixture()
def config_dir(tmp_path: Path) -> Path:
    """Create a temp config directory with default.toml."""
    config = tmp_path / "config"
    config.mkdir()

    default_toml = config / "default.toml"
    default_toml.write_text(
        """\
[binance]
base_url = "https://api.binance.com"
quote_asset = "USDT"
chart_interval = "1m"
kline_limit = 100
change_interval = "5m"

[markets]
symbols = ["BTCUSDT", "ETHUSDT"]

[markets.names]
BTCUSDT = "Bitcoin"
ETHUSDT = "Ethereum"

[polling]
table_seconds = 2.0
price_seconds = 1.0
chart_seconds = 1.0
max_backoff_seconds = 30.0

[trading]
payout_pct = 50
durations = [120, 300]
default_duration = 120
countdown_start = 300

[chain]
default_network = "open-campus-codex"

[audit]
log_path = "logs/audit.jsonl"

[networks.open-campus-codex]
chain_id = 656476
name = "Open Campus Codex"
currency_name = "EDU"
currency_symbol = "EDU"
rpc_url = "https://open-campus-codex-sepolia.drpc.org"
explorer_name = "Open Campus Codex Explorer"
explorer_url = "https://opencampus-codex.blockscout.com"
testnet = true

[networks.rootstock]
chain_id = 31
name = "Rootstock Testnet"
currency_name = "TRBTC"
currency_symbol = "tRBTC"
rpc_url = "https://public-node.testnet.rsk.co"
testnet = true
"""
    )
    return config


@pytest.fixture()
def config_loader(config_dir: Path) -> ConfigLoader:
    """ConfigLoader with test config."""
    loader = ConfigLoader(config_dir=config_dir, env="test")
    loader.load()
    return loader


def make_kline(
    close: str,
    open_: str | None = None,
    minute: int = 0,
    symbol: str = "BTCUSDT",
    interval: str = "1m",
) -> Kline:
    start = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC) + timedelta(minutes=minute)
    o = Decimal(open_ if open_ is not None else close)
    c = Decimal(close)
    return Kline(
        symbol=symbol,
        interval=interval,
        open_time=start,
        open=o,
        high=max(o, c),
        low=min(o, c),
        close=c,
        volume=Decimal("10"),
        close_time=start + timedelta(seconds=59),
    )


def make_ticker(symbol: str, last: str, change_pct: str) -> Ticker:
    return Ticker(
        symbol=symbol,
        last_price=Decimal(last),
        price_change_percent=Decimal(change_pct),
    )


@pytest.fixture()
def fake_binance() -> AsyncMock:
    """BinanceClient double returning a steady BTC/ETH market."""
    client = AsyncMock(spec=BinanceClient)
    client.get_tickers = AsyncMock(
        return_value=[
            make_ticker("BTCUSDT", "50500", "2.5"),
            make_ticker("ETHUSDT", "2970", "-1.2"),
        ]
    )

    async def _klines(symbol: str, interval: str = "1m", limit: int = 100, **_: object) -> list[Kline]:
        if interval == "5m":
            open_ = "50000" if symbol == "BTCUSDT" else "3000"
            return [make_kline(open_, open_=open_, symbol=symbol, interval="5m")]
        return [make_kline(str(50000 + i), minute=i, symbol=symbol) for i in range(3)]

    client.get_klines = AsyncMock(side_effect=_klines)
    client.get_price = AsyncMock(return_value=Decimal("50123.45"))
    return client


@pytest.fixture()
def sample_bet() -> Bet:
    return Bet(
        bet_id=7,
        user=TEST_USER,
        token_type="btc",
        direction=BetDirection.UP,
        start_time=1_704_110_400,
        expiry_time=1_704_110_520,
        amount_wei=10**17,
        payout_pct=50,
    )


@pytest.fixture()
def kline_factory() -> Callable[..., Kline]:
    return make_kline


@pytest.fixture()
def ticker_factory() -> Callable[..., Ticker]:
    return make_ticker
