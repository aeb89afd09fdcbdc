"""Audit logger: append-only trail for bet placements and claims."""

from __future__ import annotations

import asyncio
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from stocked.core.logging import get_logger, log_bet_event
from stocked.models.bet import Bet, BetRequest

logger = get_logger(__name__)

_DEFAULT_LOG_PATH = "logs/audit.jsonl"


class AuditLogger:
    """Append-only JSONL audit trail, mirrored to the structlog audit logger."""

    def __init__(self, log_path: str | Path = _DEFAULT_LOG_PATH) -> None:
        self._log_path = Path(log_path)
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    @property
    def log_path(self) -> Path:
        return self._log_path

    async def log_placement(self, request: BetRequest, tx_hash: str, user: str) -> None:
        entry = {
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "event_type": "bet",
            "action": "place",
            "tx_hash": tx_hash,
            "user": user,
            "asset": request.asset,
            "direction": request.direction.value,
            "amount": str(request.amount),
            "duration": request.duration,
        }
        log_bet_event("place", tx_hash, asset=request.asset, amount=str(request.amount))
        await self._persist(entry)

    async def log_claim(self, bet: Bet, tx_hash: str) -> None:
        entry = {
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "event_type": "claim",
            "action": "claim",
            "bet_id": bet.bet_id,
            "tx_hash": tx_hash,
            "user": bet.user,
            "payout_wei": str(bet.payout_wei),
        }
        log_bet_event("claim", str(bet.bet_id), tx_hash=tx_hash)
        await self._persist(entry)

    async def log_failure(self, action: str, reason: str, **context: Any) -> None:
        entry = {
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "event_type": "failure",
            "action": action,
            "reason": reason,
            **{k: str(v) for k, v in context.items()},
        }
        log_bet_event("fail", action, reason=reason)
        await self._persist(entry)

    async def _persist(self, entry: dict[str, Any]) -> None:
        line = json.dumps(entry, default=str)
        async with self._lock:
            try:
                with open(self._log_path, "a") as f:
                    f.write(line + "\n")
            except OSError:
                logger.error("audit.write_failed", path=str(self._log_path), exc_info=True)
