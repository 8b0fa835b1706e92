"""Mock identity provider client for testing.

This module provides a mock implementation of IdentityProviderProtocol
that can be used in tests and local development without making real Stytch
API calls.

Supports arbitrary users - any email can request a magic link and authenticate.
"""

from __future__ import annotations

import hashlib
from collections.abc import MutableMapping
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import urlencode

from sessiongate.auth.models import (
    SESSION_KEY,
    USER_KEY,
    AuthResult,
    OAuthStartResult,
    RevokeResult,
    SendResult,
    Session,
    UserProfile,
)

MOCK_VALID_MAGIC_TOKEN = "mock-valid-token"
MOCK_VALID_OAUTH_TOKEN = "mock-valid-oauth-token"
MOCK_EXPIRED_TOKEN = "mock-expired-token"
MOCK_OAUTH_EMAIL = "oauth-user@example.com"

# Provider error codes and messages used by the mock
_INVALID_TOKEN = ("invalid_token", "The token is invalid or has already been used")
_EXPIRED_TOKEN = ("token_expired", "token expired")


def _email_to_user_id(email: str) -> str:
    """Generate a deterministic user ID from an email."""
    return f"mock-user-{hashlib.md5(email.encode()).hexdigest()[:8]}"


def _email_to_session_token(email: str) -> str:
    """Generate a deterministic session token from an email."""
    return f"mock-session-{hashlib.md5(email.encode()).hexdigest()[:12]}"


class MockIdentityClient:
    """Mock implementation of IdentityProviderProtocol for testing.

    This client provides predictable responses for testing auth flows
    without making real API calls. Supports arbitrary users.

    Token Formats:
        - "mock-valid-token" - authenticates as last email that requested a link
        - "mock-token-{email}" - authenticates as specific email
        - "mock-valid-oauth-token" - authenticates as an OAuth user
        - "mock-expired-token" - fails with "token expired"

    Failure injection:
        ``fail_send``, ``fail_revoke`` and ``fail_oauth_start`` make the
        matching call report a provider error.
    """

    def __init__(self, storage: MutableMapping[str, Any] | None = None) -> None:
        self._storage: MutableMapping[str, Any] = storage if storage is not None else {}
        # Track calls for test assertions
        self._sent_magic_links: list[dict] = []
        self.exchange_calls: list[tuple[str, str]] = []
        self.revoke_calls = 0
        self._pending_email: str | None = None
        self.fail_send = False
        self.fail_revoke = False
        self.fail_oauth_start = False

    def get_local_session(self) -> Session | None:
        raw = self._storage.get(SESSION_KEY)
        if not raw:
            return None
        session = Session.from_dict(raw)
        return None if session.is_expired() else session

    def get_current_user(self) -> UserProfile | None:
        raw = self._storage.get(USER_KEY)
        if not raw or self.get_local_session() is None:
            return None
        return UserProfile.from_dict(raw)

    async def send_magic_link(
        self,
        email: str,
        return_url: str,
        expiry_minutes: int,
    ) -> SendResult:
        """Mock sending a magic link email. Accepts any email address."""
        self._sent_magic_links.append(
            {
                "email": email,
                "return_url": return_url,
                "expiry_minutes": expiry_minutes,
            }
        )
        if self.fail_send:
            return SendResult(
                success=False,
                error="Email could not be delivered",
                error_type="email_send_failed",
            )
        self._pending_email = email
        return SendResult(success=True, user_id=_email_to_user_id(email))

    async def exchange_magic_link_token(
        self,
        token: str,
        session_duration_minutes: int,
    ) -> AuthResult:
        self.exchange_calls.append(("magic_link", token))
        email: str | None = None
        if token.startswith("mock-token-"):
            email = token[len("mock-token-") :]
        elif token == MOCK_VALID_MAGIC_TOKEN:
            email = self._pending_email or "test@example.com"

        if email:
            return self._issue(email, session_duration_minutes, "magic_link")
        return self._failure(token)

    async def start_oauth_redirect(
        self,
        provider: str,
        return_url: str,
    ) -> OAuthStartResult:
        if self.fail_oauth_start:
            return OAuthStartResult(success=False, error="OAuth provider unavailable")
        params = {
            "public_token": "mock-public-token",
            "login_redirect_url": return_url,
            "signup_redirect_url": return_url,
        }
        redirect_url = (
            f"https://mock.stytch.com/v1/public/oauth/{provider}/start"
            f"?{urlencode(params)}"
        )
        return OAuthStartResult(success=True, redirect_url=redirect_url)

    async def exchange_oauth_token(
        self,
        token: str,
        session_duration_minutes: int,
    ) -> AuthResult:
        self.exchange_calls.append(("oauth", token))
        if token == MOCK_VALID_OAUTH_TOKEN:
            return self._issue(MOCK_OAUTH_EMAIL, session_duration_minutes, "google")
        return self._failure(token)

    async def revoke_session(self) -> RevokeResult:
        self.revoke_calls += 1
        self._storage.pop(SESSION_KEY, None)
        self._storage.pop(USER_KEY, None)
        if self.fail_revoke:
            return RevokeResult(
                success=False,
                error="Session revocation failed",
                error_type="session_not_found",
            )
        return RevokeResult(success=True)

    def _issue(self, email: str, duration_minutes: int, method: str) -> AuthResult:
        session = Session(
            session_token=_email_to_session_token(email),
            user_id=_email_to_user_id(email),
            expires_at=datetime.now(UTC) + timedelta(minutes=duration_minutes),
        )
        user = UserProfile(
            user_id=session.user_id,
            email=email,
            first_name=email.split("@")[0].replace(".", " ").title(),
            auth_methods=[method],
        )
        self._storage[SESSION_KEY] = session.to_dict()
        self._storage[USER_KEY] = user.to_dict()
        return AuthResult(success=True, session=session, user=user)

    @staticmethod
    def _failure(token: str) -> AuthResult:
        error_type, message = (
            _EXPIRED_TOKEN if token == MOCK_EXPIRED_TOKEN else _INVALID_TOKEN
        )
        return AuthResult(success=False, error=message, error_type=error_type)

    # Test helper methods

    def get_sent_magic_links(self) -> list[dict]:
        """Return list of magic links that were 'sent' (for test assertions)."""
        return self._sent_magic_links.copy()

    def clear_sent_magic_links(self) -> None:
        """Clear the list of sent magic links."""
        self._sent_magic_links.clear()
