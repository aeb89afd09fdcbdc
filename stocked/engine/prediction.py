"""Win/loss resolution of a bet from two closing prices."""

from __future__ import annotations

import time
from decimal import Decimal

from stocked.core.logging import get_logger
from stocked.interfaces import MarketDataSource
from stocked.models.bet import Bet, BetDirection, BetOutcome, PredictionResult

log = get_logger(__name__)


class PredictionDataError(Exception):
    """Raised when too few klines cover a bet window to judge it."""


def judge(direction: BetDirection, start_close: Decimal, end_close: Decimal) -> BetOutcome:
    """A flat close loses for both directions."""
    if direction is BetDirection.UP:
        return BetOutcome.WIN if end_close > start_close else BetOutcome.LOSS
    return BetOutcome.WIN if end_close < start_close else BetOutcome.LOSS


class PredictionResolver:
    """Compares the first and last 1m close inside a bet's window."""

    def __init__(self, client: MarketDataSource, interval: str = "1m") -> None:
        self._client = client
        self._interval = interval

    async def resolve(self, bet: Bet, now: float | None = None) -> PredictionResult:
        """Resolve one bet.

        Returns a pending result before expiry.

        Raises:
            PredictionDataError: If fewer than two klines cover the window.
        """
        current = time.time() if now is None else now
        if not bet.is_expired(current):
            return PredictionResult(bet_id=bet.bet_id, outcome=BetOutcome.PENDING)

        klines = await self._client.get_klines(
            bet.symbol,
            interval=self._interval,
            limit=1000,
            start_time=bet.start_time * 1000,
            end_time=bet.expiry_time * 1000,
        )
        if len(klines) < 2:
            msg = (
                f"need at least 2 klines for bet {bet.bet_id} "
                f"({bet.symbol} {bet.start_time}-{bet.expiry_time}), got {len(klines)}"
            )
            raise PredictionDataError(msg)

        start_close = klines[0].close
        end_close = klines[-1].close
        outcome = judge(bet.direction, start_close, end_close)
        log.info(
            "prediction.resolved",
            bet_id=bet.bet_id,
            symbol=bet.symbol,
            direction=bet.direction.value,
            start_close=str(start_close),
            end_close=str(end_close),
            outcome=outcome.value,
        )
        return PredictionResult(
            bet_id=bet.bet_id,
            outcome=outcome,
            start_close=start_close,
            end_close=end_close,
        )
