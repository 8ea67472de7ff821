"""Failover provider configuration."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Validated configuration loaded from ``FAILOVER_*`` environment / .env file."""

    model_config = SettingsConfigDict(
        env_prefix="FAILOVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Retry ────────────────────────────────────────────────
    retries: int = Field(default=3, ge=0)

    # ── Logging ──────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool = False

    # ── Health tracking ──────────────────────────────────────
    health_window_seconds: float = Field(default=60.0, gt=0)
    health_degraded_threshold: float = Field(default=0.30, ge=0, le=1)
    health_unhealthy_threshold: float = Field(default=0.60, ge=0, le=1)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def _ordered_thresholds(self) -> Settings:
        if self.health_degraded_threshold >= self.health_unhealthy_threshold:
            raise ValueError(
                "health_degraded_threshold must be below health_unhealthy_threshold"
            )
        return self


def get_settings(**overrides: Any) -> Settings:
    """Factory that allows test-time overrides."""
    return Settings(**overrides)
