"""Tests for sessiongate.config -- Settings and sub-models.

Every test constructs Settings(_env_file=None, ...) to avoid reading real .env files.
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import SecretStr, ValidationError

from sessiongate.config import (
    AppConfig,
    AuthConfig,
    DevConfig,
    Settings,
    StytchConfig,
    get_settings,
)


class TestDefaults:
    """Settings work with no environment at all."""

    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            s = Settings(_env_file=None)  # type: ignore[call-arg]

        assert s.stytch.project_id == ""
        assert s.stytch.environment == "test"
        assert s.auth.magic_link_expiry_minutes == 60
        assert s.auth.session_duration_minutes == 60
        assert s.auth.entry_path == "/"
        assert s.auth.callback_path == "/authenticate"
        assert s.auth.protected_path == "/dashboard"
        assert s.app.port == 8080
        assert s.dev.auth_mock is False

    def test_callback_url_joins_base_and_path(self) -> None:
        s = Settings(
            _env_file=None,  # type: ignore[call-arg]
            app=AppConfig(base_url="https://example.org/"),
        )

        assert s.callback_url == "https://example.org/authenticate"


class TestEnvironmentVariables:
    """Nested env vars use the double-underscore delimiter."""

    def test_nested_env_vars(self) -> None:
        env = {
            "STYTCH__PROJECT_ID": "project-test-1",
            "STYTCH__SECRET": "secret-1",
            "STYTCH__ENVIRONMENT": "live",
            "AUTH__SESSION_DURATION_MINUTES": "120",
            "APP__BASE_URL": "https://gate.example.org",
            "DEV__AUTH_MOCK": "true",
        }
        with patch.dict(os.environ, env, clear=True):
            s = Settings(_env_file=None)  # type: ignore[call-arg]

        assert s.stytch.project_id == "project-test-1"
        assert s.stytch.secret.get_secret_value() == "secret-1"
        assert s.stytch.environment == "live"
        assert s.auth.session_duration_minutes == 120
        assert s.callback_url == "https://gate.example.org/authenticate"
        assert s.dev.auth_mock is True


class TestValidation:
    """Misconfiguration fails fast."""

    def test_unknown_stytch_environment(self) -> None:
        with pytest.raises(ValidationError, match="STYTCH__ENVIRONMENT"):
            StytchConfig(environment="staging")

    @pytest.mark.parametrize("field", ["magic_link_expiry_minutes", "session_duration_minutes"])
    @pytest.mark.parametrize("value", [0, -5])
    def test_non_positive_durations(self, field: str, value: int) -> None:
        with pytest.raises(ValidationError, match="positive"):
            AuthConfig(**{field: value})

    def test_secret_is_masked(self) -> None:
        config = StytchConfig(secret=SecretStr("super-secret"))

        assert "super-secret" not in repr(config)


class TestGetSettings:
    def test_cached(self) -> None:
        with patch.dict(os.environ, {"DEV__AUTH_MOCK": "true"}, clear=True):
            first = get_settings()
            second = get_settings()

        assert first is second

    def test_cache_clear_reloads(self) -> None:
        with patch.dict(os.environ, {"APP__PORT": "9000"}, clear=True):
            get_settings.cache_clear()
            assert get_settings().app.port == 9000
        with patch.dict(os.environ, {"APP__PORT": "9001"}, clear=True):
            get_settings.cache_clear()
            assert get_settings().app.port == 9001

    def test_dev_config_defaults(self) -> None:
        assert DevConfig().reload is True
