"""EVM network definition."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class Network(BaseModel):
    """A chain the bet contract can be reached on."""

    key: str
    chain_id: int
    name: str
    currency_name: str
    currency_symbol: str
    currency_decimals: int = 18
    rpc_url: str
    explorer_name: str = ""
    explorer_url: str = ""
    testnet: bool = False

    @classmethod
    def from_config(cls, key: str, data: dict[str, Any]) -> Network:
        return cls(key=key, **data)

    def tx_url(self, tx_hash: str) -> str:
        if not self.explorer_url:
            return ""
        return f"{self.explorer_url.rstrip('/')}/tx/{tx_hash}"

    def address_url(self, address: str) -> str:
        if not self.explorer_url:
            return ""
        return f"{self.explorer_url.rstrip('/')}/address/{address}"

    model_config = {"frozen": True}
