"""Tests for structlog wiring."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from failover_provider import configure_logging, get_settings


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_json_logs(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_level="info", json_logs=True)
        structlog.get_logger("failover_test").info("provider_switched", to_provider="cat-1")

        lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
        record = json.loads(lines[-1])
        assert record["event"] == "provider_switched"
        assert record["to_provider"] == "cat-1"
        assert record["level"] == "info"
        assert "timestamp" in record

    def test_sets_root_level_and_single_handler(self) -> None:
        configure_logging(log_level="warning")
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_reads_settings(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(settings=get_settings(log_level="warning", json_logs=True))
        assert logging.getLogger().level == logging.WARNING

        structlog.get_logger("failover_test").warning("provider_attempt_failed")
        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["event"] == "provider_attempt_failed"

    def test_respects_level(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_level="ERROR", json_logs=True)
        structlog.get_logger("failover_test").warning("provider_attempt_failed")
        assert "provider_attempt_failed" not in capsys.readouterr().out
