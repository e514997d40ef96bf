"""Environment-driven settings for the signups API."""
from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "BridgeMind Signups API"
    app_version: str = "1.0.1"
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    database_url: str | None = None
    database_pool_size: int = 10

    allowed_origin: str | None = None
    default_cors_origin: str = "http://localhost:3000"

    rate_limit_window_ms: int = 600_000
    rate_limit_max_requests: int = 5
    rate_limit_sweep_interval_seconds: float = 3600.0
    rate_limit_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"

    sendgrid_api_key: str | None = None
    sendgrid_from_email: str | None = None
    sendgrid_from_name: str = "BridgeMind"
    smtp_server: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_pass: str | None = None
    email_timeout_seconds: float = 10.0

    competition_campaign: str = "1k-subs"
    submission_campaign: str = "1k-subs-competition"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_async_driver(cls, value: str | None) -> str | None:
        if not isinstance(value, str) or not value.strip():
            return None
        value = value.strip()
        for prefix in ("postgres://", "postgresql://"):
            if value.startswith(prefix):
                return "postgresql+asyncpg://" + value[len(prefix):]
        return value

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def origin_check_enabled(self) -> bool:
        return bool(self.allowed_origin) and self.allowed_origin != "*"

    @property
    def cors_origins(self) -> list[str]:
        return [self.allowed_origin or self.default_cors_origin]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
