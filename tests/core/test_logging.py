"""Tests for structured logging."""

from __future__ import annotations

import json

import pytest

from stocked.core.logging import configure_logging, get_audit_logger, get_logger, log_bet_event


class TestStructuredLogging:
    def test_get_logger_returns_bound_logger(self) -> None:
        logger = get_logger("test.module")
        assert logger is not None

    def test_get_logger_same_name_returns_logger(self) -> None:
        logger1 = get_logger("test.same")
        logger2 = get_logger("test.same")
        assert logger1 is not None
        assert logger2 is not None

    def test_get_audit_logger(self) -> None:
        assert get_audit_logger() is not None

    def test_log_bet_event_does_not_raise(self) -> None:
        log_bet_event(
            action="place",
            bet_ref="0xabc",
            asset="btc",
            amount="0.1",
        )

    def test_log_bet_event_with_failure(self) -> None:
        log_bet_event(
            action="fail",
            bet_ref="claim",
            reason="transaction reverted",
        )


class TestConfigureLogging:
    def test_production_renders_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(env="production", level="INFO")
        try:
            get_logger("test.json").info("bet.placed", tx_hash="0xabc")
            line = capsys.readouterr().err.strip().splitlines()[-1]
            entry = json.loads(line)
            assert entry["event"] == "bet.placed"
            assert entry["tx_hash"] == "0xabc"
            assert entry["level"] == "info"
        finally:
            configure_logging(env="development")

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(env="production", level="WARNING")
        try:
            get_logger("test.filter").info("poller.started")
            assert capsys.readouterr().err == ""
        finally:
            configure_logging(env="development")

    def test_unknown_level_falls_back_to_info(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(env="production", level="LOUD")
        try:
            get_logger("test.fallback").debug("hidden")
            get_logger("test.fallback").info("shown")
            assert "shown" in capsys.readouterr().err
        finally:
            configure_logging(env="development")
