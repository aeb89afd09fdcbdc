"""Minimal EVM JSON-RPC client over httpx."""

from __future__ import annotations

import asyncio
import itertools
from typing import Any

import httpx

from stocked.core.logging import get_logger

log = get_logger(__name__)


class RpcError(Exception):
    """Raised when the node answers with a JSON-RPC error object."""

    def __init__(self, method: str, error: Any) -> None:
        self.method = method
        self.error = error
        message = error.get("message", error) if isinstance(error, dict) else error
        super().__init__(f"{method}: {message}")


def hex_to_int(hex_str: str | None) -> int:
    """Convert hex string (with or without 0x) to int."""
    return int(hex_str, 16) if hex_str and hex_str != "0x" else 0


class RpcClient:
    """Async JSON-RPC client bound to one node URL."""

    def __init__(self, rpc_url: str, timeout: float = 30.0) -> None:
        self._rpc_url = rpc_url
        self._timeout = timeout
        self._ids = itertools.count(1)
        self._client: httpx.AsyncClient | None = None

    @property
    def url(self) -> str:
        return self._rpc_url

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
        return self._client

    async def call(self, method: str, params: list[Any]) -> Any:
        client = await self._get_client()
        resp = await client.post(
            self._rpc_url,
            json={
                "jsonrpc": "2.0",
                "method": method,
                "params": params,
                "id": next(self._ids),
            },
        )
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            log.warning("rpc.error", method=method, error=str(data["error"])[:200])
            raise RpcError(method, data["error"])
        return data.get("result")

    async def eth_call(self, to: str, data: bytes, block: str = "latest") -> bytes:
        """Execute eth_call and return raw bytes result."""
        hex_result = await self.call("eth_call", [{"to": to, "data": "0x" + data.hex()}, block])
        return bytes.fromhex(hex_result.removeprefix("0x")) if hex_result else b""

    async def get_balance(self, address: str) -> int:
        return hex_to_int(await self.call("eth_getBalance", [address, "latest"]))

    async def get_nonce(self, address: str) -> int:
        return hex_to_int(await self.call("eth_getTransactionCount", [address, "pending"]))

    async def gas_price(self) -> int:
        return hex_to_int(await self.call("eth_gasPrice", []))

    async def chain_id(self) -> int:
        return hex_to_int(await self.call("eth_chainId", []))

    async def estimate_gas(self, tx: dict[str, Any]) -> int:
        return hex_to_int(await self.call("eth_estimateGas", [tx]))

    async def send_raw_transaction(self, raw: bytes) -> str:
        return await self.call("eth_sendRawTransaction", ["0x" + raw.hex()])

    async def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 60,
        poll_interval: float = 2.0,
    ) -> dict[str, Any] | None:
        """Poll for a transaction receipt; None if it never showed up."""
        attempts = max(int(timeout / poll_interval), 1)
        for _ in range(attempts):
            result = await self.call("eth_getTransactionReceipt", [tx_hash])
            if result is not None:
                return result
            await asyncio.sleep(poll_interval)
        return None

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
