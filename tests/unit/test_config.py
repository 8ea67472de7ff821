"""Tests for settings loading and settings-driven construction."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from failover_provider import FailoverProvider, get_settings
from tests.conftest import Animal, Cockroach, Dog


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep stray FAILOVER_* variables and .env files out of the tests."""
    monkeypatch.chdir(tmp_path)
    for var in (
        "FAILOVER_RETRIES",
        "FAILOVER_LOG_LEVEL",
        "FAILOVER_JSON_LOGS",
        "FAILOVER_HEALTH_WINDOW_SECONDS",
        "FAILOVER_HEALTH_DEGRADED_THRESHOLD",
        "FAILOVER_HEALTH_UNHEALTHY_THRESHOLD",
    ):
        monkeypatch.delenv(var, raising=False)


class TestSettings:
    def test_defaults(self) -> None:
        settings = get_settings()
        assert settings.retries == 3
        assert settings.log_level == "INFO"
        assert settings.json_logs is False
        assert settings.health_window_seconds == 60.0

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FAILOVER_RETRIES", "5")
        monkeypatch.setenv("FAILOVER_JSON_LOGS", "true")
        settings = get_settings()
        assert settings.retries == 5
        assert settings.json_logs is True

    def test_dotenv_file(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("FAILOVER_RETRIES=7\n", encoding="utf-8")
        assert get_settings().retries == 7

    def test_log_level_upper_cased(self) -> None:
        assert get_settings(log_level="debug").log_level == "DEBUG"

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ValidationError):
            get_settings(retries=-1)

    def test_thresholds_must_be_ordered(self) -> None:
        with pytest.raises(ValidationError):
            get_settings(health_degraded_threshold=0.7, health_unhealthy_threshold=0.5)


class TestFromSettings:
    def test_uses_configured_retries(self) -> None:
        failover = FailoverProvider.from_settings(get_settings(retries=1))
        assert failover.retry_policy.max_retries == 1

    @pytest.mark.asyncio
    async def test_parameterized_builder(self) -> None:
        failover = FailoverProvider[Animal].from_settings(get_settings(retries=1))
        animal: Animal = failover.add_provider(Cockroach()).add_provider(Dog()).initialize()
        assert await animal.speak() == "woof"

    def test_reads_environment_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FAILOVER_RETRIES", "0")
        failover = FailoverProvider.from_settings()
        assert failover.retry_policy.max_retries == 0

    def test_forwards_should_retry_on(self) -> None:
        failover = FailoverProvider.from_settings(
            get_settings(),
            should_retry_on=lambda e: not isinstance(e, RuntimeError),
        )
        animal: Animal = failover.add_provider(Cockroach()).add_provider(Dog()).initialize()
        with pytest.raises(RuntimeError):
            animal.name()
