"""Bet lifecycle: place, list with results, claim winnings."""

from __future__ import annotations

import time
from decimal import Decimal

import httpx
from pydantic import BaseModel

from stocked.chain.contract import TransactionFailed
from stocked.chain.rpc import RpcError
from stocked.chain.wallet import Wallet
from stocked.core.logging import get_logger
from stocked.data.binance_client import BinanceDataError
from stocked.engine.bet_form import BetForm, BetValidationError
from stocked.engine.prediction import PredictionDataError, PredictionResolver
from stocked.execution.audit import AuditLogger
from stocked.interfaces import BetLedger
from stocked.models.bet import Bet, BetOutcome, BetRequest, PredictionResult

log = get_logger(__name__)


class NotClaimable(Exception):
    """Raised when a bet is unknown, claimed already, or did not win."""


class BetNotFound(NotClaimable):
    """Raised when the wallet has no bet with the requested id."""


class BetStatus(BaseModel):
    """A bet with its current resolution."""

    bet: Bet
    result: PredictionResult
    error: str = ""

    @property
    def claimable(self) -> bool:
        return self.result.is_win and not self.bet.claimed


class PlacedBet(BaseModel):
    tx_hash: str
    start_time: int
    expiry_time: int
    request: BetRequest


class BetService:
    """Ties the form rules, the contract and the price resolver together."""

    def __init__(
        self,
        contract: BetLedger,
        wallet: Wallet,
        resolver: PredictionResolver,
        audit: AuditLogger,
        payout_pct: int = 50,
        durations: tuple[int, ...] | list[int] = (120, 300),
    ) -> None:
        self._contract = contract
        self._wallet = wallet
        self._resolver = resolver
        self._audit = audit
        self._payout_pct = payout_pct
        self._durations = tuple(durations)

    @property
    def address(self) -> str:
        return self._wallet.address

    async def balance(self) -> Decimal:
        return await self._wallet.balance()

    async def new_form(self, asset: str) -> BetForm:
        """A trade form pre-loaded with the wallet's balance."""
        return BetForm(asset, balance=await self.balance(), durations=self._durations)

    async def validate(self, request: BetRequest) -> None:
        """Reject requests the trade form would reject.

        Raises:
            BetValidationError: Unsupported window, unparsable, non-positive
                or above-balance amount.
        """
        if request.duration not in self._durations:
            msg = f"duration must be one of {list(self._durations)}"
            raise BetValidationError(msg)
        form = BetForm(
            request.asset,
            balance=await self.balance(),
            durations=self._durations,
            selected=request.duration,
        )
        form.set_amount(str(request.amount))
        form.build_request(request.direction)

    async def place_bet(self, request: BetRequest, now: float | None = None) -> PlacedBet:
        """Validate and submit a bet; the stake travels as transaction value."""
        try:
            await self.validate(request)
        except BetValidationError as exc:
            await self._audit.log_failure("place", str(exc), asset=request.asset)
            raise

        start, expiry = request.window(now)
        try:
            tx_hash = await self._contract.create_bet(
                request.asset,
                request.direction,
                start,
                expiry,
                request.amount_wei,
                self._payout_pct,
            )
        except TransactionFailed as exc:
            await self._audit.log_failure("place", exc.reason, tx_hash=exc.tx_hash)
            raise

        log.info(
            "bet.placed",
            asset=request.asset,
            direction=request.direction.value,
            amount=str(request.amount),
            expiry=expiry,
            tx_hash=tx_hash,
        )
        await self._audit.log_placement(request, tx_hash, self.address)
        return PlacedBet(tx_hash=tx_hash, start_time=start, expiry_time=expiry, request=request)

    async def bets(self) -> list[Bet]:
        return await self._contract.get_user_bets(self.address)

    async def find_bet(self, bet_id: int) -> Bet:
        for bet in await self.bets():
            if bet.bet_id == bet_id:
                return bet
        msg = f"bet {bet_id} not found for {self.address}"
        raise BetNotFound(msg)

    async def status(self, bet: Bet, now: float | None = None) -> BetStatus:
        """Resolve one bet; missing price data or a failed lookup is reported, not raised."""
        try:
            result = await self._resolver.resolve(bet, now)
        except (PredictionDataError, BinanceDataError, httpx.HTTPError) as exc:
            log.warning("bet.result_unavailable", bet_id=bet.bet_id, error=str(exc))
            return BetStatus(
                bet=bet,
                result=PredictionResult(bet_id=bet.bet_id, outcome=BetOutcome.PENDING),
                error=str(exc),
            )
        return BetStatus(bet=bet, result=result)

    async def statuses(self, now: float | None = None) -> list[BetStatus]:
        current = time.time() if now is None else now
        return [await self.status(bet, current) for bet in await self.bets()]

    async def claim(self, bet_id: int, now: float | None = None) -> str:
        """Claim a resolved, winning, unclaimed bet.

        Raises:
            NotClaimable: If the bet is unknown, already claimed, pending
                or lost.
        """
        bet = await self.find_bet(bet_id)
        if bet.claimed:
            msg = f"bet {bet_id} already claimed"
            raise NotClaimable(msg)

        status = await self.status(bet, now)
        if status.result.outcome is BetOutcome.PENDING:
            msg = f"bet {bet_id} is not resolved yet"
            raise NotClaimable(msg)
        if not status.result.is_win:
            msg = f"bet {bet_id} did not win"
            raise NotClaimable(msg)

        try:
            tx_hash = await self._contract.claim_reward(bet_id)
        except TransactionFailed as exc:
            await self._audit.log_failure("claim", exc.reason, bet_id=bet_id, tx_hash=exc.tx_hash)
            raise
        log.info("bet.claimed", bet_id=bet_id, tx_hash=tx_hash, payout_wei=bet.payout_wei)
        await self._audit.log_claim(bet, tx_hash)
        return tx_hash

    async def claim_all_winnings(self, now: float | None = None) -> dict[int, str]:
        """Claim every claimable bet; failures are logged and skipped."""
        claimed: dict[int, str] = {}
        for status in await self.statuses(now):
            if not status.claimable:
                continue
            try:
                claimed[status.bet.bet_id] = await self._contract.claim_reward(status.bet.bet_id)
            except TransactionFailed as exc:
                log.error("bet.claim_failed", bet_id=status.bet.bet_id, reason=exc.reason)
                await self._audit.log_failure(
                    "claim", exc.reason, bet_id=status.bet.bet_id, tx_hash=exc.tx_hash,
                )
                continue
            except (RpcError, httpx.HTTPError) as exc:
                log.error("bet.claim_failed", bet_id=status.bet.bet_id, reason=str(exc))
                await self._audit.log_failure("claim", str(exc), bet_id=status.bet.bet_id)
                continue
            await self._audit.log_claim(status.bet, claimed[status.bet.bet_id])
        log.info("bet.claim_sweep", claimed=len(claimed))
        return claimed
