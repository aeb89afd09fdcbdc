"""Stocked HTTP API: market table, trade view, bets and claims.

Usage:
    uvicorn stocked.api.app:app --host 0.0.0.0 --port 8100
    # or
    stocked serve
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from stocked.chain.contract import TransactionFailed
from stocked.chain.rpc import RpcError
from stocked.core.logging import get_logger
from stocked.engine.bet_form import BetForm, BetValidationError
from stocked.engine.countdown import Countdown
from stocked.execution.bet_service import BetNotFound, BetStatus, NotClaimable
from stocked.models.bet import BetDirection
from stocked.models.market import TokenQuote
from stocked.runtime import Runtime, UnknownAsset, WalletUnavailable

log = get_logger(__name__)


class BetBody(BaseModel):
    direction: BetDirection
    amount: str
    duration: int | None = None


class DurationBody(BaseModel):
    duration: int


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------

def _quote_json(quote: TokenQuote) -> dict[str, Any]:
    data = quote.model_dump(mode="json")
    data["asset"] = quote.asset
    data["is_up_24h"] = quote.is_up_24h
    data["is_up_5m"] = quote.is_up_5m
    return data


def _countdown_json(countdown: Countdown) -> dict[str, Any]:
    return {
        "selected": countdown.selected,
        "time_left": countdown.time_left,
        "formatted": countdown.formatted(),
    }


def _status_json(status: BetStatus) -> dict[str, Any]:
    bet = status.bet
    return {
        "bet": bet.model_dump(mode="json"),
        "symbol": bet.symbol,
        "amount": str(bet.amount),
        "payout_wei": str(bet.payout_wei),
        "result": status.result.model_dump(mode="json"),
        "claimable": status.claimable,
        "error": status.error,
    }


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(runtime: Runtime | None = None, config_dir: str = "config") -> FastAPI:
    """Build the API around a runtime (created from config when omitted)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        rt = runtime or Runtime.from_config(config_dir=config_dir)
        app.state.runtime = rt
        await rt.start()
        log.info("api.started", network=rt.network.name, wallet=rt.has_wallet)
        try:
            yield
        finally:
            await rt.stop()

    app = FastAPI(title="Stocked API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def rt_of(request: Request) -> Runtime:
        return request.app.state.runtime

    @app.exception_handler(WalletUnavailable)
    async def _wallet_unavailable(request: Request, exc: WalletUnavailable) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(UnknownAsset)
    async def _unknown_asset(request: Request, exc: UnknownAsset) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(TransactionFailed)
    async def _tx_failed(request: Request, exc: TransactionFailed) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={"detail": exc.reason, "tx_hash": exc.tx_hash},
        )

    @app.exception_handler(RpcError)
    async def _rpc_failed(request: Request, exc: RpcError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    # -- markets ----------------------------------------------------------

    @app.get("/api/markets")
    async def get_markets(request: Request) -> dict[str, Any]:
        table = rt_of(request).market_table
        return {
            "loading": table.loading,
            "updated_at": table.updated_at.isoformat() if table.updated_at else None,
            "quotes": [_quote_json(q) for q in table.quotes],
        }

    @app.get("/api/networks")
    async def get_networks(request: Request) -> dict[str, Any]:
        rt = rt_of(request)
        return {
            "current": rt.network.key,
            "networks": [n.model_dump(mode="json") for n in rt.settings.networks.values()],
        }

    # -- trade view -------------------------------------------------------

    @app.get("/api/trade/{asset}")
    async def get_trade(asset: str, request: Request) -> dict[str, Any]:
        rt = rt_of(request)
        feed = await rt.feed(asset)
        price = feed.current_price
        return {
            "asset": feed.asset,
            "symbol": feed.symbol,
            "price": str(price) if price is not None else None,
            "chart": [p.model_dump(mode="json") for p in feed.chart],
            "countdown": _countdown_json(rt.countdown(asset)),
            "durations": rt.settings.trading.durations,
            "payout_pct": rt.settings.trading.payout_pct,
        }

    @app.post("/api/trade/{asset}/duration")
    async def select_duration(asset: str, body: DurationBody, request: Request) -> dict[str, Any]:
        rt = rt_of(request)
        if body.duration not in rt.settings.trading.durations:
            raise HTTPException(
                status_code=400,
                detail=f"duration must be one of {rt.settings.trading.durations}",
            )
        countdown = rt.countdown(asset)
        countdown.select(body.duration)
        return _countdown_json(countdown)

    @app.post("/api/trade/{asset}/bet")
    async def place_bet(asset: str, body: BetBody, request: Request) -> dict[str, Any]:
        rt = rt_of(request)
        service = rt.bet_service
        durations = rt.settings.trading.durations
        countdown = rt.countdown(asset)
        duration = body.duration or countdown.selected
        if duration not in durations:
            raise HTTPException(status_code=400, detail=f"duration must be one of {durations}")

        form = BetForm(
            asset, balance=await service.balance(), durations=durations, selected=duration,
        )
        form.set_amount(body.amount)
        try:
            bet_request = form.build_request(body.direction)
            placed = await service.place_bet(bet_request)
        except BetValidationError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        return {
            "tx_hash": placed.tx_hash,
            "tx_url": rt.network.tx_url(placed.tx_hash),
            "start_time": placed.start_time,
            "expiry_time": placed.expiry_time,
            "direction": bet_request.direction.value,
            "amount": str(bet_request.amount),
        }

    # -- wallet & bets ----------------------------------------------------

    @app.get("/api/wallet")
    async def get_wallet(request: Request) -> dict[str, Any]:
        rt = rt_of(request)
        if not rt.has_wallet:
            return {"connected": False, "network": rt.network.key}
        service = rt.bet_service
        return {
            "connected": True,
            "address": service.address,
            "balance": str(await service.balance()),
            "currency": rt.network.currency_symbol,
            "network": rt.network.key,
            "explorer": rt.network.address_url(service.address),
        }

    @app.get("/api/bets")
    async def get_bets(request: Request) -> dict[str, Any]:
        statuses = await rt_of(request).bet_service.statuses()
        return {"bets": [_status_json(s) for s in statuses]}

    @app.get("/api/bets/{bet_id}/result")
    async def get_result(bet_id: int, request: Request) -> dict[str, Any]:
        service = rt_of(request).bet_service
        try:
            bet = await service.find_bet(bet_id)
        except BetNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return _status_json(await service.status(bet))

    @app.post("/api/bets/{bet_id}/claim")
    async def claim_bet(bet_id: int, request: Request) -> dict[str, Any]:
        rt = rt_of(request)
        try:
            tx_hash = await rt.bet_service.claim(bet_id)
        except BetNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except NotClaimable as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return {"bet_id": bet_id, "tx_hash": tx_hash, "tx_url": rt.network.tx_url(tx_hash)}

    return app


app = create_app()
