"""Tests for bet models."""

from __future__ import annotations

from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError

from stocked.models.bet import (
    WEI_PER_ETHER,
    Bet,
    BetDirection,
    BetOutcome,
    BetRequest,
    PredictionResult,
    from_wei,
    to_wei,
)


class TestWeiConversion:
    def test_to_wei(self) -> None:
        assert to_wei(Decimal("1")) == WEI_PER_ETHER
        assert to_wei(Decimal("0.1")) == 10**17

    def test_to_wei_truncates(self) -> None:
        assert to_wei(Decimal("0.0000000000000000015")) == 1

    def test_from_wei(self) -> None:
        assert from_wei(25 * 10**16) == Decimal("0.25")

    @given(st.integers(min_value=0, max_value=10**27))
    def test_from_wei_inverts_to_wei(self, amount_wei: int) -> None:
        assert to_wei(from_wei(amount_wei)) == amount_wei


class TestBet:
    def test_derived_fields(self, sample_bet: Bet) -> None:
        assert sample_bet.duration == 120
        assert sample_bet.symbol == "BTCUSDT"
        assert sample_bet.amount == Decimal("0.1")

    def test_payout(self, sample_bet: Bet) -> None:
        assert sample_bet.payout_wei == 15 * 10**16

    def test_is_expired(self, sample_bet: Bet) -> None:
        assert not sample_bet.is_expired(now=sample_bet.expiry_time - 1)
        assert sample_bet.is_expired(now=sample_bet.expiry_time)

    def test_frozen(self, sample_bet: Bet) -> None:
        with pytest.raises(ValidationError):
            sample_bet.claimed = True  # type: ignore[misc]


class TestBetRequest:
    def test_asset_normalised(self) -> None:
        req = BetRequest(
            asset=" BTC ", direction=BetDirection.UP, amount=Decimal("0.5"), duration=120,
        )
        assert req.asset == "btc"
        assert req.amount_wei == 5 * 10**17

    def test_window(self) -> None:
        req = BetRequest(asset="eth", direction="down", amount=Decimal("1"), duration=300)
        assert req.direction is BetDirection.DOWN
        assert req.window(now=1000.7) == (1000, 1300)

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1")])
    def test_amount_must_be_positive(self, amount: Decimal) -> None:
        with pytest.raises(ValidationError):
            BetRequest(asset="btc", direction="up", amount=amount, duration=120)

    def test_empty_asset_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BetRequest(asset="  ", direction="up", amount=Decimal("1"), duration=120)


class TestPredictionResult:
    def test_is_win(self) -> None:
        assert PredictionResult(bet_id=1, outcome=BetOutcome.WIN).is_win
        assert not PredictionResult(bet_id=1, outcome=BetOutcome.LOSS).is_win
        assert not PredictionResult(bet_id=1, outcome=BetOutcome.PENDING).is_win
