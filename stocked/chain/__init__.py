"""Chain access: JSON-RPC, local wallet, bet contract bindings."""

from __future__ import annotations

from stocked.chain.contract import PredictionContract, TransactionFailed
from stocked.chain.rpc import RpcClient, RpcError
from stocked.chain.wallet import Wallet, WalletNotConnected

__all__ = [
    "PredictionContract",
    "RpcClient",
    "RpcError",
    "TransactionFailed",
    "Wallet",
    "WalletNotConnected",
]
