"""Shared pytest fixtures for SessionGate tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from sessiongate.auth.coordinator import AuthFlowCoordinator
from sessiongate.auth.mock import MockIdentityClient
from sessiongate.auth.state import AuthStateStore
from sessiongate.config import get_settings

CALLBACK_URL = "http://localhost:8080/authenticate"


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Each test sees freshly loaded settings."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def storage() -> dict[str, Any]:
    """Stand-in for one browser's app.storage.user."""
    return {}


@pytest.fixture
def mock_client(storage: dict[str, Any]) -> MockIdentityClient:
    return MockIdentityClient(storage)


@pytest.fixture
def store() -> AuthStateStore:
    return AuthStateStore()


@pytest.fixture
def coordinator(
    mock_client: MockIdentityClient,
    store: AuthStateStore,
) -> AuthFlowCoordinator:
    return AuthFlowCoordinator(
        mock_client,
        store,
        callback_url=CALLBACK_URL,
        magic_link_expiry_minutes=30,
        session_duration_minutes=60,
    )


@pytest.fixture
def mock_stytch_client():
    """Create a mocked Stytch Client for unit tests.

    Patches the Client constructor to return a mock, allowing
    tests to set up expected responses without making real API calls.
    """
    with patch("sessiongate.auth.client.Client") as mock_cls:
        mock_client = MagicMock()
        mock_cls.return_value = mock_client
        yield mock_client
