"""Environment-driven settings for the birthday site."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from birthday_app.constants.auth_constants import AUTH_COOKIE_MAX_AGE
from birthday_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from birthday_app.constants.storage_constants import DEFAULT_WRITE_RETRIES


class Settings(BaseSettings):
    """Application settings read from ``BIRTHDAY_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(env_prefix="BIRTHDAY_", env_file=".env", extra="ignore")

    # ============= Server Settings =============
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    # ============= Security Settings =============
    # Empty shared password leaves the invitation page open.
    guests_password: SecretStr = SecretStr("")
    admin_username: str = "admin"
    admin_password: SecretStr = SecretStr("")
    session_secret: SecretStr = SecretStr("change-me-in-production")
    session_max_age_seconds: int = Field(default=AUTH_COOKIE_MAX_AGE, gt=0)
    secure_cookies: bool = True

    # ============= Storage Settings =============
    # None keeps everything in memory.
    storage_path: Path | None = None
    optimistic_writes: bool = False
    write_retries: int = Field(default=DEFAULT_WRITE_RETRIES, ge=1)

    # ============= Matching Settings =============
    # Fixed seed for reproducible pairings; None draws fresh randomness.
    random_seed: int | None = None

    # ============= Content Settings =============
    invitation_path: Path | None = None
    questions_seed_path: Path | None = None
    # Question bank is written here on shutdown when set.
    questions_export_path: Path | None = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
