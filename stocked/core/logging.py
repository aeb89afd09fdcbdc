"""Structured logging for Stocked.

Production (``STOCKED_ENV=production``) renders one JSON object per line;
every other environment gets the colored console renderer. Both write to
stderr so CLI output on stdout stays clean.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, cast

import structlog

_configured = False


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Resolved per logger so a swapped sys.stderr is honoured.
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(env: str | None = None, level: str | None = None) -> None:
    """(Re)configure structlog.

    Args:
        env: Environment name; defaults to ``STOCKED_ENV``.
        level: Minimum level name; defaults to ``STOCKED_LOG_LEVEL`` or INFO.
    """
    global _configured
    env = env or os.environ.get("STOCKED_ENV", "development")
    level = level or os.environ.get("STOCKED_LOG_LEVEL", "INFO")

    renderer: structlog.types.Processor
    if env == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Named logger; configures structlog from the environment on first use."""
    if not _configured:
        configure_logging()
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


def get_audit_logger() -> structlog.stdlib.BoundLogger:
    return get_logger("stocked.audit")


def log_bet_event(action: str, bet_ref: str, **kwargs: Any) -> None:
    """Emit a bet lifecycle event on the audit logger.

    Args:
        action: place, claim or fail.
        bet_ref: On-chain bet id or transaction hash.
        **kwargs: Extra context (asset, amount, reason...).
    """
    get_audit_logger().info(
        "bet_event",
        event_type="audit",
        action=action,
        bet_ref=bet_ref,
        **kwargs,
    )
