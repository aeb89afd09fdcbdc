"""Typed settings built from the merged TOML config."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from stocked.chain.networks import BUILTIN_NETWORKS
from stocked.config.loader import ConfigError, ConfigLoader
from stocked.models.network import Network

DEFAULT_SYMBOLS = ["BTCUSDT", "ETHUSDT", "BNBUSDT", "XRPUSDT", "ADAUSDT"]
DEFAULT_NAMES = {
    "BTCUSDT": "Bitcoin",
    "ETHUSDT": "Ethereum",
    "BNBUSDT": "Binance Coin",
    "XRPUSDT": "Ripple",
    "ADAUSDT": "Cardano",
}


class BinanceSettings(BaseModel):
    base_url: str = "https://api.binance.com"
    quote_asset: str = "USDT"
    chart_interval: str = "1m"
    kline_limit: int = 100
    change_interval: str = "5m"
    request_timeout_seconds: float = 10.0
    weight_per_minute: int = 6000


class MarketSettings(BaseModel):
    symbols: list[str] = Field(default_factory=lambda: list(DEFAULT_SYMBOLS))
    names: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_NAMES))

    def name_for(self, symbol: str) -> str:
        return self.names.get(symbol.upper(), "")


class PollingSettings(BaseModel):
    table_seconds: float = 2.0
    price_seconds: float = 1.0
    chart_seconds: float = 1.0
    max_backoff_seconds: float = 30.0


class TradingSettings(BaseModel):
    payout_pct: int = 50
    durations: list[int] = Field(default_factory=lambda: [120, 300])
    default_duration: int = 120
    countdown_start: int = 300
    contract_address: str = ""


class ChainSettings(BaseModel):
    default_network: str = "open-campus-codex"
    gas_margin: Decimal = Decimal("1.2")
    receipt_timeout_seconds: int = 60


class Settings(BaseModel):
    env: str = "development"
    binance: BinanceSettings = Field(default_factory=BinanceSettings)
    markets: MarketSettings = Field(default_factory=MarketSettings)
    polling: PollingSettings = Field(default_factory=PollingSettings)
    trading: TradingSettings = Field(default_factory=TradingSettings)
    chain: ChainSettings = Field(default_factory=ChainSettings)
    networks: dict[str, Network] = Field(default_factory=lambda: dict(BUILTIN_NETWORKS))
    audit_log_path: str = "logs/audit.jsonl"
    api_host: str = "0.0.0.0"
    api_port: int = 8100

    @classmethod
    def from_loader(cls, loader: ConfigLoader) -> Settings:
        """Validate ranges and build typed settings from a loader."""
        loader.validate_ranges()
        raw = loader.config
        networks = {
            key: Network.from_config(key, data)
            for key, data in raw.get("networks", {}).items()
        } or dict(BUILTIN_NETWORKS)
        return cls(
            env=loader.env,
            binance=BinanceSettings(**raw.get("binance", {})),
            markets=MarketSettings(**raw.get("markets", {})),
            polling=PollingSettings(**raw.get("polling", {})),
            trading=TradingSettings(**raw.get("trading", {})),
            chain=ChainSettings(**raw.get("chain", {})),
            networks=networks,
            audit_log_path=loader.get("audit.log_path", "logs/audit.jsonl"),
            api_host=loader.get("api.host", "0.0.0.0"),
            api_port=loader.get("api.port", 8100),
        )

    def network(self, key_or_id: str | int | None = None) -> Network:
        """Look up a network by config key, chain id or display name.

        Raises:
            ConfigError: If no such network is configured.
        """
        wanted = self.chain.default_network if key_or_id is None else key_or_id
        for key, net in self.networks.items():
            if str(wanted) in (key, str(net.chain_id)) or str(wanted).lower() == net.name.lower():
                return net
        msg = f"Unknown network: {wanted}"
        raise ConfigError(msg)
