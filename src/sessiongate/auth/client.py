"""Stytch consumer client wrapper for authentication.

This module provides a wrapper around the Stytch SDK that implements
IdentityProviderProtocol: magic link email login, OAuth via Google or
Microsoft, and session revocation. The issued session and a user projection
are kept in a per-browser storage mapping (NiceGUI's ``app.storage.user`` in
the running app).
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from datetime import datetime
from typing import Any
from urllib.parse import urlencode

from stytch import Client
from stytch.core.response_base import StytchError

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

logger = logging.getLogger(__name__)

# Stytch API base URLs
STYTCH_TEST_API = "https://test.stytch.com"
STYTCH_LIVE_API = "https://api.stytch.com"


def _attr(obj: Any, name: str) -> Any:
    """Read a field from an SDK object or a plain dict."""
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _extract_auth_methods(raw_providers: list[Any] | None) -> list[str]:
    """Extract provider types from a Stytch user's OAuth providers.

    Handles both object providers (with provider_type attr) and dicts,
    depending on Stytch SDK version.
    """
    if not raw_providers:
        return []
    methods = [_attr(p, "provider_type") for p in raw_providers]
    return [m for m in methods if m]


def _parse_expiry(raw: Any) -> datetime | None:
    if raw is None or isinstance(raw, datetime):
        return raw
    return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))


def _user_profile(user: Any, user_id: str, fallback_method: str) -> UserProfile:
    """Project a Stytch user onto the fields the dashboard shows."""
    emails = _attr(user, "emails") or []
    name = _attr(user, "name")
    methods = _extract_auth_methods(_attr(user, "providers"))
    return UserProfile(
        user_id=_attr(user, "user_id") or user_id,
        email=_attr(emails[0], "email") if emails else None,
        first_name=_attr(name, "first_name") if name else None,
        last_name=_attr(name, "last_name") if name else None,
        auth_methods=methods or [fallback_method],
    )


def _error_result(e: StytchError) -> tuple[str, str]:
    """Return (message, error_type) from a Stytch error."""
    error_type = e.details.error_type
    message = getattr(e.details, "error_message", None) or error_type
    return message, error_type


class StytchIdentityClient:
    """Wrapper around the Stytch consumer Client.

    This class implements IdentityProviderProtocol for one browser: it
    sends magic links, exchanges callback tokens and keeps the resulting
    session in ``storage``.
    """

    def __init__(
        self,
        project_id: str,
        secret: str,
        public_token: str,
        storage: MutableMapping[str, Any],
        *,
        environment: str = "test",
    ) -> None:
        """Initialize the Stytch client.

        Args:
            project_id: Stytch project ID.
            secret: Stytch secret key.
            public_token: Stytch public token (for OAuth start URLs).
            storage: Per-browser mapping the session is kept in.
            environment: Either "test" or "live".
        """
        self._client = Client(
            project_id=project_id,
            secret=secret,
            environment=environment,
        )
        self._public_token = public_token
        self._storage = storage
        self._environment = environment

    def get_local_session(self) -> Session | None:
        raw = self._storage.get(SESSION_KEY)
        if not raw:
            return None
        session = Session.from_dict(raw)
        if session.is_expired():
            logger.debug("Stored session expired at %s", session.expires_at)
            return None
        return session

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
        """Send a login-or-create magic link email."""
        try:
            response = await self._client.magic_links.email.login_or_create_async(
                email=email,
                login_magic_link_url=return_url,
                signup_magic_link_url=return_url,
                login_expiration_minutes=expiry_minutes,
                signup_expiration_minutes=expiry_minutes,
            )
            return SendResult(
                success=True,
                user_id=response.user_id,
                user_created=response.user_created,
            )
        except StytchError as e:
            message, error_type = _error_result(e)
            logger.warning(
                "Magic link send failed",
                extra={"email": email, "error_type": error_type},
            )
            return SendResult(success=False, error=message, error_type=error_type)

    async def exchange_magic_link_token(
        self,
        token: str,
        session_duration_minutes: int,
    ) -> AuthResult:
        try:
            response = await self._client.magic_links.authenticate_async(
                token=token,
                session_duration_minutes=session_duration_minutes,
            )
        except StytchError as e:
            message, error_type = _error_result(e)
            logger.warning("Magic link auth failed", extra={"error_type": error_type})
            return AuthResult(success=False, error=message, error_type=error_type)
        return self._store_session(response, _attr(response, "session"), "magic_link")

    async def start_oauth_redirect(
        self,
        provider: str,
        return_url: str,
    ) -> OAuthStartResult:
        """Build the public OAuth start URL for ``provider``.

        Stytch hosts the start endpoint, so no API call is made here.
        """
        if not self._public_token:
            return OAuthStartResult(
                success=False,
                error="OAuth login is not configured",
            )
        base_url = STYTCH_TEST_API if self._environment == "test" else STYTCH_LIVE_API
        params = {
            "public_token": self._public_token,
            "login_redirect_url": return_url,
            "signup_redirect_url": return_url,
        }
        redirect_url = f"{base_url}/v1/public/oauth/{provider}/start?{urlencode(params)}"
        return OAuthStartResult(success=True, redirect_url=redirect_url)

    async def exchange_oauth_token(
        self,
        token: str,
        session_duration_minutes: int,
    ) -> AuthResult:
        try:
            response = await self._client.oauth.authenticate_async(
                token=token,
                session_duration_minutes=session_duration_minutes,
            )
        except StytchError as e:
            message, error_type = _error_result(e)
            logger.warning("OAuth auth failed", extra={"error_type": error_type})
            return AuthResult(success=False, error=message, error_type=error_type)
        # OAuth responses carry the session as user_session
        session = _attr(response, "user_session") or _attr(response, "session")
        return self._store_session(response, session, "oauth")

    async def revoke_session(self) -> RevokeResult:
        """Revoke the stored session; local copies are dropped either way."""
        raw = self._storage.get(SESSION_KEY)
        try:
            if not raw:
                return RevokeResult(success=True)
            await self._client.sessions.revoke_async(
                session_token=raw["session_token"],
            )
            return RevokeResult(success=True)
        except StytchError as e:
            message, error_type = _error_result(e)
            logger.warning("Session revoke failed", extra={"error_type": error_type})
            return RevokeResult(success=False, error=message, error_type=error_type)
        finally:
            self._storage.pop(SESSION_KEY, None)
            self._storage.pop(USER_KEY, None)

    def _store_session(
        self,
        response: Any,
        session_obj: Any,
        fallback_method: str,
    ) -> AuthResult:
        session = Session(
            session_token=response.session_token,
            user_id=response.user_id,
            expires_at=_parse_expiry(_attr(session_obj, "expires_at")),
        )
        user = _user_profile(_attr(response, "user"), response.user_id, fallback_method)
        self._storage[SESSION_KEY] = session.to_dict()
        self._storage[USER_KEY] = user.to_dict()
        return AuthResult(success=True, session=session, user=user)
