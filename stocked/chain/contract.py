"""Bet contract bindings: createBet, claimReward, getUserBets.

Calldata is ABI-encoded with eth_abi and transactions are signed by the
local wallet, then broadcast through the JSON-RPC node.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from eth_abi import decode, encode
from eth_utils import keccak, to_checksum_address

from stocked.chain.rpc import RpcClient, RpcError, hex_to_int
from stocked.chain.wallet import Wallet
from stocked.core.logging import get_logger
from stocked.models.bet import Bet, BetDirection

logger = get_logger(__name__)

CREATE_BET_SIG = "createBet(string,string,uint256,uint256,uint256,uint256)"
CLAIM_REWARD_SIG = "claimReward(uint256)"
GET_USER_BETS_SIG = "getUserBets(address)"

# id, user, tokenType, betType, startTime, expiryTime, amount, payoutPercentage, claimed
BET_TUPLE = "(uint256,address,string,string,uint256,uint256,uint256,uint256,bool)"


def selector(signature: str) -> bytes:
    """First four bytes of keccak256(signature)."""
    return keccak(text=signature)[:4]


class TransactionFailed(Exception):
    """Raised when a bet transaction reverts or never confirms."""

    def __init__(self, tx_hash: str, reason: str) -> None:
        self.tx_hash = tx_hash
        self.reason = reason
        super().__init__(f"{reason}: {tx_hash}" if tx_hash else reason)


def encode_create_bet(
    token_type: str,
    direction: BetDirection,
    start_time: int,
    expiry_time: int,
    amount_wei: int,
    payout_pct: int,
) -> bytes:
    return selector(CREATE_BET_SIG) + encode(
        ["string", "string", "uint256", "uint256", "uint256", "uint256"],
        [token_type.lower(), direction.value, start_time, expiry_time, amount_wei, payout_pct],
    )


def encode_claim_reward(bet_id: int) -> bytes:
    return selector(CLAIM_REWARD_SIG) + encode(["uint256"], [bet_id])


def encode_get_user_bets(user: str) -> bytes:
    return selector(GET_USER_BETS_SIG) + encode(["address"], [to_checksum_address(user)])


def decode_user_bets(raw: bytes) -> list[Bet]:
    if not raw:
        return []
    (rows,) = decode([f"{BET_TUPLE}[]"], raw)
    return [
        Bet(
            bet_id=row[0],
            user=to_checksum_address(row[1]),
            token_type=row[2],
            direction=BetDirection(row[3].lower()),
            start_time=row[4],
            expiry_time=row[5],
            amount_wei=row[6],
            payout_pct=row[7],
            claimed=row[8],
        )
        for row in rows
    ]


class PredictionContract:
    """Client for the deployed bet contract on one network."""

    def __init__(
        self,
        rpc: RpcClient,
        address: str,
        chain_id: int,
        wallet: Wallet | None = None,
        gas_margin: Decimal = Decimal("1.2"),
        receipt_timeout: float = 60,
    ) -> None:
        if not address:
            msg = "contract address is required"
            raise ValueError(msg)
        self._rpc = rpc
        self._address = to_checksum_address(address)
        self._chain_id = chain_id
        self._wallet = wallet
        self._gas_margin = gas_margin
        self._receipt_timeout = receipt_timeout

    @property
    def address(self) -> str:
        return self._address

    @property
    def wallet(self) -> Wallet | None:
        return self._wallet

    def _require_wallet(self) -> Wallet:
        if self._wallet is None:
            msg = "a wallet is required to send transactions"
            raise ValueError(msg)
        return self._wallet

    async def _transact(self, call_data: bytes, value: int = 0) -> str:
        """Sign, send and confirm a transaction to the contract."""
        wallet = self._require_wallet()
        sender = wallet.address
        nonce = await self._rpc.get_nonce(sender)
        gas_price = await self._rpc.gas_price()

        estimate_tx: dict[str, Any] = {
            "from": sender,
            "to": self._address,
            "data": "0x" + call_data.hex(),
            "value": hex(value),
        }
        try:
            gas = int(Decimal(await self._rpc.estimate_gas(estimate_tx)) * self._gas_margin)
        except RpcError as exc:
            # A failed estimate means the call would revert; nothing is broadcast.
            logger.error("contract.estimate_gas_failed", error=str(exc))
            raise TransactionFailed("", f"gas estimation failed: {exc}") from exc

        tx = {
            "to": self._address,
            "data": call_data,
            "gas": gas,
            "gasPrice": gas_price,
            "nonce": nonce,
            "chainId": self._chain_id,
            "value": value,
        }
        tx_hash = await self._rpc.send_raw_transaction(wallet.sign_transaction(tx))
        logger.info("contract.tx_sent", tx_hash=tx_hash, gas=gas, value=value)

        receipt = await self._rpc.wait_for_receipt(tx_hash, timeout=self._receipt_timeout)
        if receipt is None:
            raise TransactionFailed(tx_hash, "receipt timeout")
        if hex_to_int(receipt.get("status", "0x0")) != 1:
            logger.error("contract.tx_reverted", tx_hash=tx_hash)
            raise TransactionFailed(tx_hash, "transaction reverted")
        return tx_hash

    async def create_bet(
        self,
        token_type: str,
        direction: BetDirection,
        start_time: int,
        expiry_time: int,
        amount_wei: int,
        payout_pct: int,
    ) -> str:
        """Place a bet, sending the stake as the transaction value."""
        if expiry_time <= start_time:
            msg = "expiry_time must be after start_time"
            raise ValueError(msg)
        call_data = encode_create_bet(
            token_type, direction, start_time, expiry_time, amount_wei, payout_pct,
        )
        return await self._transact(call_data, value=amount_wei)

    async def claim_reward(self, bet_id: int) -> str:
        return await self._transact(encode_claim_reward(bet_id))

    async def get_user_bets(self, user: str) -> list[Bet]:
        raw = await self._rpc.eth_call(self._address, encode_get_user_bets(user))
        return decode_user_bets(raw)
