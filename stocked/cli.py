"""Stocked CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from decimal import Decimal, InvalidOperation

import httpx

from stocked.core.logging import configure_logging
from stocked.engine.bet_form import BetValidationError
from stocked.models.bet import BetDirection, BetRequest


def _confirm_bet(request: BetRequest, network: str, currency: str) -> bool:
    """Require explicit confirmation before sending funds on-chain."""
    print("=" * 60)
    print("  You are about to place an on-chain bet.")
    print("=" * 60)
    print(f"  Network:   {network}")
    print(f"  Market:    {request.asset.upper()}/USDT")
    print(f"  Direction: {request.direction.value}")
    print(f"  Amount:    {request.amount} {currency}")
    print(f"  Window:    {request.duration}s")
    print("=" * 60)
    response = input('Type "yes" to confirm: ')
    return response.strip().lower() == "yes"


def _amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        msg = "Please enter a valid number"
        raise argparse.ArgumentTypeError(msg) from exc
    if not amount.is_finite() or amount <= 0:
        msg = "amount must be a positive number"
        raise argparse.ArgumentTypeError(msg)
    return amount


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="stocked",
        description="Stocked: timed up/down crypto price prediction",
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        default="config",
        help="Config directory path (default: config)",
    )
    parser.add_argument(
        "--env",
        type=str,
        default=None,
        help="Environment name (default: from STOCKED_ENV)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: from STOCKED_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--network",
        type=str,
        default=None,
        help="Network key, chain id or name (default: chain.default_network)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default=None)
    serve.add_argument("--port", type=int, default=None)

    sub.add_parser("markets", help="Print the market table once")

    price = sub.add_parser("price", help="Print the live price of one asset")
    price.add_argument("asset", type=str, help="Asset id, e.g. btc")

    bet = sub.add_parser("bet", help="Place an up/down bet")
    bet.add_argument("asset", type=str, help="Asset id, e.g. btc")
    bet.add_argument("direction", choices=[d.value for d in BetDirection])
    bet.add_argument("amount", type=_amount, help="Stake in the network's native currency")
    bet.add_argument(
        "--duration",
        type=int,
        default=None,
        help="Bet window in seconds (default: trading.default_duration)",
    )
    bet.add_argument(
        "--yes",
        action="store_true",
        default=False,
        help="Skip confirmation (requires STOCKED_AUTO_CONFIRM=true env var).",
    )

    sub.add_parser("bets", help="List your bets with their results")

    claim = sub.add_parser("claim", help="Claim winnings")
    target = claim.add_mutually_exclusive_group(required=True)
    target.add_argument("--bet-id", type=int, default=None)
    target.add_argument("--all", action="store_true", default=False)

    return parser


async def _print_markets(args: argparse.Namespace) -> int:
    from stocked.runtime import Runtime

    rt = Runtime.from_config(config_dir=args.config_dir, env=args.env, network=args.network)
    try:
        quotes = await rt.market_table.refresh()
    finally:
        await rt.stop()
    print(f"{'Symbol':<10}{'Name':<14}{'Price (USDT)':>16}{'24h':>10}{'5m':>10}")
    for q in quotes:
        print(
            f"{q.symbol:<10}{q.name:<14}{q.price:>16.2f}"
            f"{q.change_24h_pct:>9.2f}%{q.change_5m_pct:>9.2f}%"
        )
    return 0


async def _print_price(args: argparse.Namespace) -> int:
    from stocked.runtime import Runtime

    rt = Runtime.from_config(config_dir=args.config_dir, env=args.env, network=args.network)
    try:
        feed = await rt.feed(args.asset)
        price = await feed.refresh_price()
    finally:
        await rt.stop()
    print(f"{feed.asset.upper()}/USDT ${price:.2f}")
    return 0


async def _place_bet(args: argparse.Namespace) -> int:
    from stocked.runtime import Runtime

    rt = Runtime.from_config(config_dir=args.config_dir, env=args.env, network=args.network)
    try:
        request = BetRequest(
            asset=args.asset,
            direction=BetDirection(args.direction),
            amount=args.amount,
            duration=args.duration or rt.settings.trading.default_duration,
        )
        auto_confirmed = (
            args.yes and os.environ.get("STOCKED_AUTO_CONFIRM", "").lower() == "true"
        )
        if not auto_confirmed and not _confirm_bet(
            request, rt.network.name, rt.network.currency_symbol,
        ):
            print("Bet cancelled.")
            return 1
        try:
            placed = await rt.bet_service.place_bet(request)
        except BetValidationError as exc:
            print(f"Bet rejected: {exc}")
            return 1
        print(f"Bet placed: {placed.tx_hash}")
        url = rt.network.tx_url(placed.tx_hash)
        if url:
            print(url)
        return 0
    finally:
        await rt.stop()


async def _list_bets(args: argparse.Namespace) -> int:
    from stocked.runtime import Runtime

    rt = Runtime.from_config(config_dir=args.config_dir, env=args.env, network=args.network)
    try:
        statuses = await rt.bet_service.statuses()
    finally:
        await rt.stop()
    for s in statuses:
        flag = "claimed" if s.bet.claimed else ("claimable" if s.claimable else "")
        print(
            f"#{s.bet.bet_id:<5}{s.bet.symbol:<10}{s.bet.direction.value:<6}"
            f"{s.bet.amount:>12} {s.result.outcome.value:<8}{flag}"
        )
    return 0


async def _claim(args: argparse.Namespace) -> int:
    from stocked.execution.bet_service import NotClaimable
    from stocked.runtime import Runtime

    rt = Runtime.from_config(config_dir=args.config_dir, env=args.env, network=args.network)
    try:
        if args.all:
            claimed = await rt.bet_service.claim_all_winnings()
            for bet_id, tx_hash in claimed.items():
                print(f"Claimed #{bet_id}: {tx_hash}")
            print(f"{len(claimed)} bet(s) claimed")
            return 0
        try:
            tx_hash = await rt.bet_service.claim(args.bet_id)
        except NotClaimable as exc:
            print(f"Cannot claim: {exc}")
            return 1
        print(f"Claimed #{args.bet_id}: {tx_hash}")
        return 0
    finally:
        await rt.stop()


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from stocked.api.app import create_app
    from stocked.runtime import Runtime

    runtime = Runtime.from_config(config_dir=args.config_dir, env=args.env, network=args.network)
    host = args.host or runtime.settings.api_host
    port = args.port or runtime.settings.api_port
    print(f"Serving Stocked API on {host}:{port}")
    uvicorn.run(create_app(runtime), host=host, port=port)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    from stocked.chain.contract import TransactionFailed
    from stocked.chain.rpc import RpcError
    from stocked.config.loader import ConfigError
    from stocked.data.binance_client import BinanceDataError
    from stocked.runtime import UnknownAsset, WalletUnavailable

    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(env=args.env, level=args.log_level)

    handlers = {
        "markets": _print_markets,
        "price": _print_price,
        "bet": _place_bet,
        "bets": _list_bets,
        "claim": _claim,
    }
    try:
        if args.command == "serve":
            return _serve(args)
        return asyncio.run(handlers[args.command](args))
    except (ConfigError, UnknownAsset, WalletUnavailable) as exc:
        print(f"Error: {exc}")
    except TransactionFailed as exc:
        print(f"Transaction failed: {exc}")
    except (BinanceDataError, RpcError, httpx.HTTPError) as exc:
        print(f"Network error: {exc}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
