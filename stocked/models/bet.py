"""Bet models: direction, on-chain bet record, request and result."""

from __future__ import annotations

import time
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from stocked.models.market import symbol_for

WEI_PER_ETHER = 10**18


def to_wei(amount: Decimal) -> int:
    """Ether amount → wei, truncating below one wei."""
    return int(amount * WEI_PER_ETHER)


def from_wei(amount_wei: int) -> Decimal:
    return Decimal(amount_wei) / Decimal(WEI_PER_ETHER)


class BetDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class BetOutcome(str, Enum):
    WIN = "win"
    LOSS = "loss"
    PENDING = "pending"


class Bet(BaseModel):
    """A bet as recorded by the contract."""

    bet_id: int
    user: str
    token_type: str
    direction: BetDirection
    start_time: int
    expiry_time: int
    amount_wei: int
    payout_pct: int
    claimed: bool = False

    @property
    def duration(self) -> int:
        return self.expiry_time - self.start_time

    @property
    def symbol(self) -> str:
        return symbol_for(self.token_type)

    @property
    def amount(self) -> Decimal:
        return from_wei(self.amount_wei)

    @property
    def payout_wei(self) -> int:
        """Stake plus the payout percentage on top."""
        return self.amount_wei + self.amount_wei * self.payout_pct // 100

    def is_expired(self, now: float | None = None) -> bool:
        current = time.time() if now is None else now
        return current >= self.expiry_time

    model_config = {"frozen": True}


class BetRequest(BaseModel):
    """A bet the user wants to place."""

    asset: str
    direction: BetDirection
    amount: Decimal = Field(gt=0)
    duration: int = Field(gt=0)

    @field_validator("asset")
    @classmethod
    def asset_lower(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            msg = "asset must not be empty"
            raise ValueError(msg)
        return value

    @property
    def amount_wei(self) -> int:
        return to_wei(self.amount)

    def window(self, now: float | None = None) -> tuple[int, int]:
        """(start, expiry) in unix seconds for a bet placed now."""
        start = int(time.time() if now is None else now)
        return start, start + self.duration

    model_config = {"frozen": True}


class PredictionResult(BaseModel):
    """Win/loss verdict for a bet from two closing prices."""

    bet_id: int
    outcome: BetOutcome
    start_close: Decimal | None = None
    end_close: Decimal | None = None

    @property
    def is_win(self) -> bool:
        return self.outcome is BetOutcome.WIN

    model_config = {"frozen": True}
