"""Unit tests for AuthFlowCoordinator.

Flows run against MockIdentityClient; failure paths use AsyncMock/MagicMock
clients to control exactly what the provider reports.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from sessiongate.auth.coordinator import AuthFlowCoordinator, parse_oauth_provider
from sessiongate.auth.errors import (
    ProviderError,
    StateInconsistency,
    ValidationError,
)
from sessiongate.auth.models import (
    SESSION_KEY,
    OAuthProvider,
    OAuthStartResult,
    RevokeResult,
    Session,
    UserProfile,
)
from sessiongate.auth.state import AuthStateStore
from tests.conftest import CALLBACK_URL


def _coordinator_for(client, store: AuthStateStore | None = None) -> AuthFlowCoordinator:
    return AuthFlowCoordinator(
        client,
        store or AuthStateStore(),
        callback_url=CALLBACK_URL,
    )


class TestCheckExistingSession:
    """Tests for the startup session check."""

    def test_live_session_sets_authenticated(self, coordinator, storage) -> None:
        storage[SESSION_KEY] = Session(
            session_token="tok",
            user_id="user-1",
            expires_at=datetime.now(UTC) + timedelta(hours=1),
        ).to_dict()

        assert coordinator.check_existing_session() is True
        assert coordinator.store.get() is True

    def test_no_session_sets_unauthenticated(self, coordinator) -> None:
        coordinator.store.set(True)

        assert coordinator.check_existing_session() is False
        assert coordinator.store.get() is False

    def test_expired_session_is_absent(self, coordinator, storage) -> None:
        storage[SESSION_KEY] = Session(
            session_token="tok",
            user_id="user-1",
            expires_at=datetime.now(UTC) - timedelta(minutes=1),
        ).to_dict()

        assert coordinator.check_existing_session() is False

    def test_client_error_degrades_to_unauthenticated(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A raising session check never propagates and never leaves True."""
        client = MagicMock()
        client.get_local_session.side_effect = RuntimeError("storage unavailable")
        store = AuthStateStore(authenticated=True)
        coordinator = _coordinator_for(client, store)

        with caplog.at_level(logging.ERROR):
            result = coordinator.check_existing_session()

        assert result is False
        assert store.get() is False
        assert "storage unavailable" in caplog.text

    def test_client_error_is_logged_as_inconsistency(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        cause = RuntimeError("storage unavailable")
        client = MagicMock()
        client.get_local_session.side_effect = cause

        with caplog.at_level(logging.ERROR):
            _coordinator_for(client).check_existing_session()

        logged = caplog.records[-1].exc_info[1]
        assert isinstance(logged, StateInconsistency)
        assert logged.__cause__ is cause

    def test_makes_no_network_call(self) -> None:
        client = MagicMock()
        client.get_local_session.return_value = None
        _coordinator_for(client).check_existing_session()

        client.send_magic_link.assert_not_called()
        client.revoke_session.assert_not_called()


class TestSendMagicLink:
    """Tests for send_magic_link."""

    async def test_success_sends_to_callback_route(
        self, coordinator, mock_client
    ) -> None:
        await coordinator.send_magic_link("user@example.com")

        sent = mock_client.get_sent_magic_links()
        assert sent == [
            {
                "email": "user@example.com",
                "return_url": CALLBACK_URL,
                "expiry_minutes": 30,
            }
        ]

    async def test_success_does_not_authenticate(self, coordinator) -> None:
        """The user is only invited; status stays False."""
        await coordinator.send_magic_link("user@example.com")

        assert coordinator.store.get() is False

    @pytest.mark.parametrize("email", ["", "   ", None])
    async def test_empty_email_is_validation_error(
        self, coordinator, mock_client, email
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await coordinator.send_magic_link(email)

        assert exc_info.value.message == "Please enter your email"
        assert mock_client.get_sent_magic_links() == []

    async def test_strips_surrounding_whitespace(self, coordinator, mock_client) -> None:
        await coordinator.send_magic_link("  user@example.com ")

        assert mock_client.get_sent_magic_links()[0]["email"] == "user@example.com"

    async def test_provider_failure_raises_provider_error(
        self, coordinator, mock_client
    ) -> None:
        mock_client.fail_send = True

        with pytest.raises(ProviderError) as exc_info:
            await coordinator.send_magic_link("user@example.com")

        assert exc_info.value.message == "Email could not be delivered"
        assert exc_info.value.error_type == "email_send_failed"
        assert coordinator.store.get() is False

    async def test_network_error_raises_provider_error(self, mock_client) -> None:
        """A transport failure surfaces as ProviderError, not a raw exception."""
        mock_client.send_magic_link = AsyncMock(
            side_effect=ConnectionError("network unreachable")
        )
        store = AuthStateStore()

        with pytest.raises(ProviderError) as exc_info:
            await _coordinator_for(mock_client, store).send_magic_link(
                "user@example.com"
            )

        assert exc_info.value.message == "network unreachable"
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert store.get() is False

    async def test_blank_network_error_uses_fallback_message(self) -> None:
        client = MagicMock()
        client.send_magic_link = AsyncMock(side_effect=TimeoutError())

        with pytest.raises(ProviderError) as exc_info:
            await _coordinator_for(client).send_magic_link("user@example.com")

        assert exc_info.value.message == "Failed to send magic link. Please try again."


class TestStartOAuth:
    """Tests for start_oauth."""

    @pytest.mark.parametrize("provider", ["google", "microsoft"])
    async def test_returns_consent_url(self, coordinator, provider) -> None:
        url = await coordinator.start_oauth(provider)

        assert f"/oauth/{provider}/start" in url
        assert "login_redirect_url=http%3A%2F%2Flocalhost%3A8080%2Fauthenticate" in url
        assert "signup_redirect_url=http%3A%2F%2Flocalhost%3A8080%2Fauthenticate" in url

    async def test_accepts_enum_member(self, coordinator) -> None:
        url = await coordinator.start_oauth(OAuthProvider.MICROSOFT)

        assert "/oauth/microsoft/start" in url

    async def test_unknown_provider_is_validation_error(self) -> None:
        client = MagicMock()
        client.start_oauth_redirect = AsyncMock()

        with pytest.raises(ValidationError):
            await _coordinator_for(client).start_oauth("myspace")

        client.start_oauth_redirect.assert_not_called()

    async def test_provider_failure_raises_provider_error(
        self, coordinator, mock_client
    ) -> None:
        mock_client.fail_oauth_start = True

        with pytest.raises(ProviderError) as exc_info:
            await coordinator.start_oauth("google")

        assert exc_info.value.message == "OAuth provider unavailable"

    async def test_missing_redirect_url_is_provider_error(self) -> None:
        client = MagicMock()
        client.start_oauth_redirect = AsyncMock(
            return_value=OAuthStartResult(success=True, redirect_url=None)
        )

        with pytest.raises(ProviderError) as exc_info:
            await _coordinator_for(client).start_oauth("google")

        assert "Google" in exc_info.value.message

    async def test_network_error_raises_provider_error(self, mock_client) -> None:
        mock_client.start_oauth_redirect = AsyncMock(
            side_effect=ConnectionError("network unreachable")
        )
        store = AuthStateStore()

        with pytest.raises(ProviderError) as exc_info:
            await _coordinator_for(mock_client, store).start_oauth("microsoft")

        assert exc_info.value.message == "network unreachable"
        assert store.get() is False

    async def test_blank_network_error_uses_fallback_message(self) -> None:
        client = MagicMock()
        client.start_oauth_redirect = AsyncMock(side_effect=TimeoutError())

        with pytest.raises(ProviderError) as exc_info:
            await _coordinator_for(client).start_oauth("google")

        assert exc_info.value.message == "Failed to start Google login. Please try again."

    async def test_does_not_change_status(self, coordinator) -> None:
        await coordinator.start_oauth("google")

        assert coordinator.store.get() is False


class TestLogout:
    """Tests for logout: always ends signed out."""

    async def test_successful_revoke(self, coordinator, mock_client) -> None:
        coordinator.store.set(True)

        await coordinator.logout()

        assert mock_client.revoke_calls == 1
        assert coordinator.store.get() is False

    async def test_rejected_revoke_still_signs_out(
        self, coordinator, mock_client
    ) -> None:
        mock_client.fail_revoke = True
        coordinator.store.set(True)

        await coordinator.logout()

        assert coordinator.store.get() is False

    async def test_raising_revoke_still_signs_out(self) -> None:
        client = MagicMock()
        client.revoke_session = AsyncMock(side_effect=ConnectionError("offline"))
        store = AuthStateStore(authenticated=True)

        await _coordinator_for(client, store).logout()

        assert store.get() is False

    async def test_subscribers_see_sign_out(self, coordinator) -> None:
        coordinator.store.set(True)
        seen: list[bool] = []
        coordinator.store.subscribe(seen.append)

        await coordinator.logout()

        assert seen == [True, False]

    async def test_revoke_result_checked_before_status_change(self) -> None:
        """Status flips only after the revoke call returns."""
        store = AuthStateStore(authenticated=True)
        observed: list[bool] = []

        async def revoke() -> RevokeResult:
            observed.append(store.get())
            return RevokeResult(success=True)

        client = MagicMock()
        client.revoke_session = revoke

        await _coordinator_for(client, store).logout()

        assert observed == [True]
        assert store.get() is False


class TestCurrentUser:
    """Tests for current_user."""

    async def test_returns_profile_after_login(self, coordinator, mock_client) -> None:
        await mock_client.exchange_magic_link_token("mock-token-ada@example.com", 60)

        user = coordinator.current_user()

        assert user is not None
        assert user.email == "ada@example.com"

    def test_none_when_signed_out(self, coordinator) -> None:
        assert coordinator.current_user() is None

    def test_client_error_is_none(self) -> None:
        client = MagicMock()
        client.get_current_user.side_effect = RuntimeError("boom")

        assert _coordinator_for(client).current_user() is None

    def test_passes_through_profile(self) -> None:
        profile = UserProfile(user_id="u-1", email="a@b.c")
        client = MagicMock()
        client.get_current_user.return_value = profile

        assert _coordinator_for(client).current_user() is profile


class TestParseOAuthProvider:
    def test_known_names(self) -> None:
        assert parse_oauth_provider("google") is OAuthProvider.GOOGLE
        assert parse_oauth_provider("microsoft") is OAuthProvider.MICROSOFT

    def test_unknown_name(self) -> None:
        with pytest.raises(ValidationError, match="Unsupported OAuth provider"):
            parse_oauth_provider("github")
