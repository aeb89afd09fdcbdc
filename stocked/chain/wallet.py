"""Locally held signing wallet."""

from __future__ import annotations

import os
from decimal import Decimal
from typing import Any

from eth_account import Account
from eth_utils import to_checksum_address

from stocked.chain.rpc import RpcClient
from stocked.core.logging import get_logger
from stocked.models.bet import from_wei

logger = get_logger(__name__)

PRIVATE_KEY_ENV = "STOCKED_PRIVATE_KEY"


class WalletNotConnected(Exception):
    """Raised when no signing key is configured."""


def mask_address(address: str) -> str:
    if len(address) <= 10:
        return address
    return address[:6] + "..." + address[-4:]


def _mask_secret(secret: str) -> str:
    if len(secret) <= 4:
        return "****"
    return "*" * 8 + secret[-4:]


class Wallet:
    """An EOA that signs bet transactions.

    Reads the key from ``STOCKED_PRIVATE_KEY`` unless one is passed.
    """

    def __init__(self, rpc: RpcClient, private_key: str | None = None) -> None:
        key = private_key if private_key is not None else os.environ.get(PRIVATE_KEY_ENV, "")
        if not key:
            msg = f"{PRIVATE_KEY_ENV} is required to connect a wallet"
            raise WalletNotConnected(msg)
        self._account = Account.from_key(key)
        self._rpc = rpc
        logger.info(
            "wallet.connected",
            address=mask_address(self._account.address),
            key=_mask_secret(key),
            rpc_url=rpc.url[:40],
        )

    @property
    def address(self) -> str:
        return to_checksum_address(self._account.address)

    async def balance_wei(self) -> int:
        return await self._rpc.get_balance(self.address)

    async def balance(self) -> Decimal:
        """Native balance in ether units."""
        return from_wei(await self.balance_wei())

    def sign_transaction(self, tx: dict[str, Any]) -> bytes:
        signed = self._account.sign_transaction(tx)
        return bytes(signed.raw_transaction)
