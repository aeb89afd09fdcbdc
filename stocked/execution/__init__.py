"""Execution layer: bet placement, claims, audit trail, rate limiting."""

from __future__ import annotations

from stocked.execution.audit import AuditLogger
from stocked.execution.rate_limiter import WeightRateLimiter

__all__ = [
    "AuditLogger",
    "WeightRateLimiter",
]
