"""Built-in testnet definitions, used when the config declares none."""

from __future__ import annotations

from stocked.models.network import Network

BASE_SEPOLIA = Network(
    key="base-sepolia",
    chain_id=84532,
    name="Base Sepolia",
    currency_name="Sepolia Ether",
    currency_symbol="ETH",
    rpc_url="https://sepolia.base.org",
    explorer_name="Basescan",
    explorer_url="https://sepolia.basescan.org",
    testnet=True,
)

CITREA = Network(
    key="citrea",
    chain_id=5115,
    name="Citrea Testnet",
    currency_name="Citrea BTC",
    currency_symbol="cBTC",
    rpc_url="https://rpc.testnet.citrea.xyz",
    explorer_name="Citrea Explorer",
    explorer_url="https://explorer.testnet.citrea.xyz",
    testnet=True,
)

ROOTSTOCK = Network(
    key="rootstock",
    chain_id=31,
    name="Rootstock Testnet",
    currency_name="TRBTC",
    currency_symbol="tRBTC",
    rpc_url="https://public-node.testnet.rsk.co",
    explorer_name="Rootstock Explorer",
    explorer_url="https://explorer.testnet.rootstock.io",
    testnet=True,
)

OPEN_CAMPUS_CODEX = Network(
    key="open-campus-codex",
    chain_id=656476,
    name="Open Campus Codex",
    currency_name="EDU",
    currency_symbol="EDU",
    rpc_url="https://open-campus-codex-sepolia.drpc.org",
    explorer_name="Open Campus Codex Explorer",
    explorer_url="https://opencampus-codex.blockscout.com",
    testnet=True,
)

BUILTIN_NETWORKS: dict[str, Network] = {
    net.key: net for net in (BASE_SEPOLIA, CITREA, ROOTSTOCK, OPEN_CAMPUS_CODEX)
}
