"""Runtime wiring: clients, polled views, countdowns and the bet service."""

from __future__ import annotations

import os

from stocked.chain.contract import PredictionContract
from stocked.chain.rpc import RpcClient
from stocked.chain.wallet import PRIVATE_KEY_ENV, Wallet
from stocked.config.loader import ConfigLoader
from stocked.config.settings import Settings
from stocked.core.logging import get_logger
from stocked.data.binance_client import BinanceClient
from stocked.data.market_table import MarketTable
from stocked.data.poller import Poller
from stocked.data.price_feed import PriceFeed
from stocked.engine.countdown import Countdown
from stocked.engine.prediction import PredictionResolver
from stocked.execution.audit import AuditLogger
from stocked.execution.bet_service import BetService
from stocked.models.market import symbol_for
from stocked.models.network import Network

log = get_logger(__name__)

CONTRACT_ADDRESS_ENV = "STOCKED_CONTRACT_ADDRESS"


class WalletUnavailable(Exception):
    """Raised when a wallet-backed operation runs without key or contract."""


class UnknownAsset(Exception):
    """Raised for an asset whose symbol is not in the configured markets."""


class Runtime:
    """Owns every long-lived object the API and CLI share.

    Price feeds and countdowns are created per asset on first use.
    The bet service exists only when both a signing key and a contract
    address are configured.
    """

    def __init__(
        self,
        settings: Settings,
        network: str | int | None = None,
        binance: BinanceClient | None = None,
        bet_service: BetService | None = None,
    ) -> None:
        self.settings = settings
        self.network: Network = settings.network(network)
        self.binance = binance or BinanceClient(
            base_url=settings.binance.base_url,
            timeout=settings.binance.request_timeout_seconds,
            weight_per_minute=settings.binance.weight_per_minute,
        )
        self.market_table = MarketTable(
            self.binance,
            settings.markets.symbols,
            settings.markets.names,
            change_interval=settings.binance.change_interval,
            poll_interval=settings.polling.table_seconds,
            max_backoff=settings.polling.max_backoff_seconds,
        )
        self.resolver = PredictionResolver(self.binance, interval=settings.binance.chart_interval)
        self._feeds: dict[str, PriceFeed] = {}
        self._countdowns: dict[str, Countdown] = {}
        self._clock = Poller("countdown", self._tick_countdowns, 1.0)
        self._rpc: RpcClient | None = None
        self._bet_service = bet_service
        if self._bet_service is None:
            self._bet_service = self._build_bet_service()

    @classmethod
    def from_config(
        cls,
        config_dir: str = "config",
        env: str | None = None,
        network: str | int | None = None,
    ) -> Runtime:
        loader = ConfigLoader(config_dir=config_dir, env=env)
        loader.load()
        return cls(Settings.from_loader(loader), network=network)

    def _build_bet_service(self) -> BetService | None:
        key = os.environ.get(PRIVATE_KEY_ENV, "")
        address = os.environ.get(CONTRACT_ADDRESS_ENV, "") or self.settings.trading.contract_address
        if not key or not address:
            log.info(
                "runtime.read_only",
                has_key=bool(key),
                has_contract=bool(address),
            )
            return None

        self._rpc = RpcClient(self.network.rpc_url)
        wallet = Wallet(self._rpc, private_key=key)
        contract = PredictionContract(
            self._rpc,
            address,
            chain_id=self.network.chain_id,
            wallet=wallet,
            gas_margin=self.settings.chain.gas_margin,
            receipt_timeout=self.settings.chain.receipt_timeout_seconds,
        )
        return BetService(
            contract,
            wallet,
            self.resolver,
            AuditLogger(self.settings.audit_log_path),
            payout_pct=self.settings.trading.payout_pct,
            durations=self.settings.trading.durations,
        )

    @property
    def bet_service(self) -> BetService:
        if self._bet_service is None:
            msg = f"wallet not connected: set {PRIVATE_KEY_ENV} and {CONTRACT_ADDRESS_ENV}"
            raise WalletUnavailable(msg)
        return self._bet_service

    @property
    def has_wallet(self) -> bool:
        return self._bet_service is not None

    def _asset_key(self, asset: str) -> str:
        key = asset.strip().lower()
        symbol = symbol_for(key, self.settings.binance.quote_asset)
        if symbol not in {s.upper() for s in self.settings.markets.symbols}:
            msg = f"unknown asset: {asset}"
            raise UnknownAsset(msg)
        return key

    async def feed(self, asset: str) -> PriceFeed:
        """The running price feed for ``asset``, started on first request.

        Raises:
            UnknownAsset: If the asset is not one of the configured markets.
        """
        key = self._asset_key(asset)
        feed = self._feeds.get(key)
        if feed is None:
            binance = self.settings.binance
            polling = self.settings.polling
            feed = PriceFeed(
                self.binance,
                key,
                chart_interval=binance.chart_interval,
                chart_limit=binance.kline_limit,
                price_seconds=polling.price_seconds,
                chart_seconds=polling.chart_seconds,
                max_backoff=polling.max_backoff_seconds,
                quote_asset=binance.quote_asset,
            )
            self._feeds[key] = feed
            await feed.start()
        return feed

    def countdown(self, asset: str) -> Countdown:
        key = self._asset_key(asset)
        countdown = self._countdowns.get(key)
        if countdown is None:
            countdown = Countdown(
                selected=self.settings.trading.default_duration,
                initial=self.settings.trading.countdown_start,
            )
            self._countdowns[key] = countdown
        return countdown

    async def _tick_countdowns(self) -> None:
        for countdown in self._countdowns.values():
            countdown.tick()

    async def start(self) -> None:
        await self.market_table.start()
        await self._clock.start()

    async def stop(self) -> None:
        await self._clock.stop()
        await self.market_table.stop()
        for feed in self._feeds.values():
            await feed.stop()
        await self.binance.close()
        if self._rpc is not None:
            await self._rpc.close()
        log.info("runtime.stopped")
