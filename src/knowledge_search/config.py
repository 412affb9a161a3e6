"""Runtime configuration for the Knowledge Search client."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed configuration model."""

    model_config = SettingsConfigDict(env_prefix="knowledge_search_", env_file=".env", case_sensitive=False)

    environment: Literal["dev", "test", "prod"] = "dev"

    # Webhook
    endpoint: str = "http://localhost:5678/webhook/ai-search"
    timeout_ms: int = Field(default=30_000, gt=0)
    # Accepted for compatibility with existing deployments; no retry loop consumes it.
    max_retries: int = Field(default=1, ge=0)

    # Presentation
    scroll_delay_ms: int = Field(default=100, ge=0)
    display_timezone: str | None = None  # IANA name, local zone when unset
    timestamp_format: str = "%Y/%m/%d %H:%M:%S"

    log_level: str = "INFO"

    # Gradio UI
    ui_host: str = "127.0.0.1"
    ui_port: int = 7860

    # Mock webhook (development only)
    mock_host: str = "127.0.0.1"
    mock_port: int = 5678

    @field_validator("endpoint")
    @classmethod
    def _endpoint_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("endpoint must not be empty")
        return value

    @field_validator("display_timezone")
    @classmethod
    def _timezone_exists(cls, value: str | None) -> str | None:
        if not value:
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
            raise ValueError(f"unknown time zone: {value!r}") from exc
        return value

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


@lru_cache(maxsize=1)
def _cached_settings() -> Settings:
    return Settings()


def get_settings(override: Optional[dict[str, object]] = None) -> Settings:
    """Return settings, optionally overriding values without mutating cache."""

    if override:
        return Settings(**override)
    return _cached_settings()
