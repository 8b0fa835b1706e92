"""Centralised application configuration using pydantic-settings.

All environment variables are read through the Settings class.
Consumers call ``get_settings()`` to obtain a cached, validated instance.
Tests construct ``Settings(_env_file=None, ...)`` directly for isolation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# src/sessiongate/config.py  ->  parent x3  ->  project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

_STYTCH_ENVIRONMENTS = frozenset({"test", "live"})


# ---------------------------------------------------------------------------
# Sub-models (one per configuration domain)
# ---------------------------------------------------------------------------
class StytchConfig(BaseModel):
    """Stytch consumer project credentials."""

    project_id: str = ""
    secret: SecretStr = SecretStr("")
    public_token: str = ""
    environment: str = "test"

    @field_validator("environment")
    @classmethod
    def known_environment(cls, value: str) -> str:
        if value not in _STYTCH_ENVIRONMENTS:
            msg = f"STYTCH__ENVIRONMENT must be 'test' or 'live', got {value!r}"
            raise ValueError(msg)
        return value


class AuthConfig(BaseModel):
    """Login flow tuning and the routes the flows land on."""

    magic_link_expiry_minutes: int = 60
    session_duration_minutes: int = 60
    entry_path: str = "/"
    callback_path: str = "/authenticate"
    protected_path: str = "/dashboard"

    @field_validator("magic_link_expiry_minutes", "session_duration_minutes")
    @classmethod
    def positive_minutes(cls, value: int) -> int:
        if value <= 0:
            msg = "Durations must be a positive number of minutes"
            raise ValueError(msg)
        return value


class AppConfig(BaseModel):
    """Application runtime configuration."""

    base_url: str = "http://localhost:8080"
    port: int = 8080
    storage_secret: SecretStr = SecretStr("dev-secret-change-me")
    log_dir: Path = Path("logs")


class DevConfig(BaseModel):
    """Development and testing toggles."""

    auth_mock: bool = False
    reload: bool = True


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Application settings with automatic .env loading and type validation.

    Environment variables use double-underscore delimiter for nesting:
    ``STYTCH__PROJECT_ID``, ``AUTH__SESSION_DURATION_MINUTES``,
    ``DEV__AUTH_MOCK``, etc.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    stytch: StytchConfig = StytchConfig()
    auth: AuthConfig = AuthConfig()
    app: AppConfig = AppConfig()
    dev: DevConfig = DevConfig()

    @property
    def callback_url(self) -> str:
        """Absolute URL the identity provider redirects back to."""
        return f"{self.app.base_url.rstrip('/')}{self.auth.callback_path}"


# ---------------------------------------------------------------------------
# Singleton access
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    settings = Settings()

    env_file = settings.model_config.get("env_file")
    if env_file is not None and Path(str(env_file)).is_file():
        logger.info("Settings loaded .env from: %s", env_file)
    else:
        logger.info("Settings: no .env file found, using env vars and defaults")

    return settings
