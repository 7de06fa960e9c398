"""Application configuration settings."""
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Deployment environment: "dev" | "staging" | "prod"
ENV = os.getenv("HYDRO_ENV", "dev").lower()

# Shared bootstrap key, only honoured in dev-like environments.
DEV_API_KEY = os.getenv("DEV_API_KEY") or os.getenv("API_KEY") or "dev-secret-key"
DEV_API_KEY_ALLOWED = ENV in {"dev", "local", "test"}

API_SCOPES = {"viewer", "operator", "admin"}


class Settings(BaseSettings):
    """Environment configuration for the HydroWatch backend."""

    app_env: str = ENV
    database_url: str = "sqlite:///hydrowatch.db"
    SECRET_KEY: str = "change-me"
    DEV_API_KEY: str | None = Field(
        default=DEV_API_KEY,
        validation_alias=AliasChoices("DEV_API_KEY", "API_KEY"),
    )
    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"

    # --- Database bootstrap ----------------------------------------------
    ALLOW_DB_CREATE_ALL: bool = False

    # --- Scheduler -------------------------------------------------------
    SCHEDULER_ENABLED: bool = Field(
        default=False,
        validation_alias=AliasChoices("SCHEDULER_ENABLED", "HYDRO_SCHEDULER_ENABLED"),
    )
    NOTIFICATION_DISPATCH_INTERVAL_SECONDS: int = Field(default=60, ge=5)
    NOTIFICATION_BATCH_SIZE: int = Field(default=100, ge=1)

    # --- Notification channels -------------------------------------------
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_USE_TLS: bool = True
    NOTIFICATION_FROM_ADDRESS: str = "alerts@hydrowatch.local"

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("SMTP_HOST", "SENTRY_DSN")
    @classmethod
    def _strip_empty(cls, value: str | None) -> str | None:
        """Normalise blank optional strings to ``None``."""

        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class AppInfo(BaseModel):
    name: str = "hydrowatch-backend"
    version: str = "0.1.0"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return settings


__all__ = [
    "ENV",
    "DEV_API_KEY",
    "DEV_API_KEY_ALLOWED",
    "API_SCOPES",
    "Settings",
    "AppInfo",
    "settings",
    "get_settings",
]
