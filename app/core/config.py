# app/core/config.py
from __future__ import annotations

"""
# ContentNow — Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; explicit where prod needs secrets.
- One place for the content-expiry scheduler knobs (interval, lease, report window).
- Optional external systems (Redis lease) so imports never crash in dev.

## Usage
    from app.core.config import settings
"""

import logging
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)
load_dotenv()  # harmless in prod; convenient in dev


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Content expiry:
        - `CONTENT_EXPIRY_INTERVAL_MS` is the wall-clock cadence of scheduled passes.
        - `CONTENT_EXPIRY_LOCK_ENABLED` wraps each scheduled pass in a Redis lease
          (only useful when more than one worker replica runs the scheduler).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "ContentNow API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENV: Literal["development", "staging", "production"] = "development"
    ENABLE_DOCS: bool = True

    # ── Database (PostgreSQL) ─────────────────────────────────
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = Field(...)
    POSTGRES_DB: str = "contentnow"

    # ── Redis (advisory lease for the expiry pass) ────────────
    REDIS_URL: str = "redis://localhost:6379/0"

    # ── Content expiry engine ─────────────────────────────────
    CONTENT_EXPIRY_SCHEDULER: bool = True
    CONTENT_EXPIRY_INTERVAL_MS: int = Field(60 * 60 * 1000, ge=1000)  # hourly
    CONTENT_EXPIRY_UPCOMING_DAYS: int = Field(7, ge=1, le=365)
    CONTENT_EXPIRY_LOCK_ENABLED: bool = False
    CONTENT_EXPIRY_LOCK_KEY: str = "maintenance:content-expiry:lock"
    CONTENT_EXPIRY_LOCK_TTL_SECONDS: int = Field(300, ge=10, le=24 * 60 * 60)

    # ── Validators / normalizers ──────────────────────────────
    @field_validator("CONTENT_EXPIRY_LOCK_KEY", mode="before")
    @classmethod
    def _strip_lock_key(cls, v) -> str:
        s = str(v or "").strip()
        return s or "maintenance:content-expiry:lock"

    # ── Derived / convenience properties ─────────────────────
    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENV.lower() == "development"

    # Database DSNs (stringified for simplicity)
    @property
    def DATABASE_URL(self) -> str:
        """Sync DSN."""
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def ASYNC_DATABASE_URL(self) -> str:
        """Async SQLAlchemy DSN."""
        return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")

    @property
    def TEST_DATABASE_URL(self) -> str:
        """Async test DSN (suffix `_test`)."""
        return (
            self.DATABASE_URL
            .replace(self.POSTGRES_DB, f"{self.POSTGRES_DB}_test")
            .replace("postgresql://", "postgresql+asyncpg://")
        )


# Singleton instance
settings = Settings()
