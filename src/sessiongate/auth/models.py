"""Data models for authentication results.

These dataclasses represent the outcomes of identity provider operations,
providing a consistent interface between the real Stytch client and mock.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

# Keys the identity provider clients keep their state under in browser storage
SESSION_KEY = "stytch_session"
USER_KEY = "stytch_user"

# Value of the stytch_token_type query parameter that selects the OAuth exchange
OAUTH_TOKEN_TYPE = "oauth"


class OAuthProvider(StrEnum):
    """Third-party providers offered on the login page."""

    GOOGLE = "google"
    MICROSOFT = "microsoft"


@dataclass(frozen=True)
class Session:
    """A live session issued by the identity provider.

    Attributes:
        session_token: Opaque token identifying the session.
        user_id: The provider's user ID.
        expires_at: When the session stops being valid (UTC), if known.
    """

    session_token: str
    user_id: str
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(UTC)) >= self.expires_at

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_token": self.session_token,
            "user_id": self.user_id,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        expires_raw = data.get("expires_at")
        return cls(
            session_token=data["session_token"],
            user_id=data.get("user_id", ""),
            expires_at=datetime.fromisoformat(expires_raw) if expires_raw else None,
        )


@dataclass(frozen=True)
class UserProfile:
    """Display projection of the authenticated user.

    Attributes:
        user_id: The provider's user ID.
        email: Primary email address.
        first_name: Given name, if the provider supplied one.
        last_name: Family name, if the provider supplied one.
        auth_methods: Provider types the user has signed in with.
    """

    user_id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    auth_methods: list[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        """Full name, or "User" when the provider gave none."""
        if not self.first_name and not self.last_name:
            return "User"
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def display_email(self) -> str:
        return self.email or "No email available"

    @property
    def display_user_id(self) -> str:
        return self.user_id or "N/A"

    @property
    def display_auth_methods(self) -> str:
        return ", ".join(self.auth_methods) if self.auth_methods else "Unknown"

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "auth_methods": list(self.auth_methods),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserProfile:
        return cls(
            user_id=data.get("user_id", ""),
            email=data.get("email"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            auth_methods=list(data.get("auth_methods") or []),
        )


@dataclass(frozen=True)
class SendResult:
    """Result of sending a magic link email.

    Attributes:
        success: Whether the email was sent successfully.
        user_id: The Stytch user ID (if successful).
        user_created: True if this was a new user signup.
        error: Provider message if the operation failed.
        error_type: Provider error code if the operation failed.
    """

    success: bool
    user_id: str | None = None
    user_created: bool = False
    error: str | None = None
    error_type: str | None = None


@dataclass(frozen=True)
class AuthResult:
    """Result of exchanging a magic link or OAuth token for a session.

    Attributes:
        success: Whether authentication succeeded.
        session: The issued session (if successful).
        user: Projection of the authenticated user (if successful).
        error: Provider message if authentication failed.
        error_type: Provider error code if authentication failed.
    """

    success: bool
    session: Session | None = None
    user: UserProfile | None = None
    error: str | None = None
    error_type: str | None = None


@dataclass(frozen=True)
class OAuthStartResult:
    """Result of starting an OAuth flow.

    Attributes:
        success: Whether the provider consent URL was generated.
        redirect_url: The URL to send the browser to.
        error: Provider message if the operation failed.
    """

    success: bool
    redirect_url: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class RevokeResult:
    """Result of revoking the current session."""

    success: bool
    error: str | None = None
    error_type: str | None = None


@dataclass(frozen=True)
class PendingFlow:
    """Which login flow produced a callback; used only to pick the exchange."""

    kind: str
    provider: str | None = None

    @classmethod
    def magic_link(cls) -> PendingFlow:
        return cls(kind="magic-link")

    @classmethod
    def oauth(cls, provider: str | None = None) -> PendingFlow:
        return cls(kind="oauth", provider=provider)

    @property
    def is_oauth(self) -> bool:
        return self.kind == "oauth"

    def __str__(self) -> str:
        if self.is_oauth and self.provider:
            return f"oauth:{self.provider}"
        return self.kind


@dataclass(frozen=True)
class CallbackParameters:
    """Query parameters of the redirect that lands on the callback route.

    Attributes:
        token: The one-time token to exchange; None when absent.
        token_type: The stytch_token_type discriminator; None when absent.
    """

    token: str | None
    token_type: str | None = None

    @classmethod
    def from_query(cls, query: Any) -> CallbackParameters:
        """Build from any mapping with ``.get`` (dict, Starlette QueryParams)."""
        return cls(
            token=query.get("token") or None,
            token_type=query.get("stytch_token_type") or None,
        )

    @property
    def flow(self) -> PendingFlow:
        """OAuth only for the exact marker; anything else is a magic link."""
        if self.token_type == OAUTH_TOKEN_TYPE:
            return PendingFlow.oauth()
        return PendingFlow.magic_link()
