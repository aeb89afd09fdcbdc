"""Protocol interfaces for Stocked components."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from stocked.models.bet import Bet, BetDirection
    from stocked.models.market import Kline, Ticker


@runtime_checkable
class MarketDataSource(Protocol):
    """Protocol for exchange market data (Binance REST)."""

    async def get_price(self, symbol: str) -> Decimal: ...

    async def get_tickers(self, symbols: list[str]) -> list[Ticker]: ...

    async def get_klines(
        self,
        symbol: str,
        interval: str = ...,
        limit: int = ...,
        start_time: int | None = ...,
        end_time: int | None = ...,
    ) -> list[Kline]: ...


@runtime_checkable
class BetLedger(Protocol):
    """Protocol for the on-chain bet store."""

    async def create_bet(
        self,
        token_type: str,
        direction: BetDirection,
        start_time: int,
        expiry_time: int,
        amount_wei: int,
        payout_pct: int,
    ) -> str: ...

    async def claim_reward(self, bet_id: int) -> str: ...

    async def get_user_bets(self, user: str) -> list[Bet]: ...
