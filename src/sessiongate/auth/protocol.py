"""Protocol defining the identity provider client interface.

Both StytchIdentityClient and MockIdentityClient implement this protocol,
allowing them to be used interchangeably. Each client owns the session-token
storage for one browser; the coordinator only reads presence and the user
projection from it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from sessiongate.auth.models import (
        AuthResult,
        OAuthStartResult,
        RevokeResult,
        SendResult,
        Session,
        UserProfile,
    )


class IdentityProviderProtocol(Protocol):
    """Protocol for identity provider clients.

    This defines the interface that both the real Stytch client
    and the mock client must implement.
    """

    def get_local_session(self) -> Session | None:
        """Return the stored session if one exists and has not expired.

        Reads local storage only; never contacts the provider.
        """
        ...

    async def send_magic_link(
        self,
        email: str,
        return_url: str,
        expiry_minutes: int,
    ) -> SendResult:
        """Send a one-time login link to the user.

        Args:
            email: The recipient's email address.
            return_url: URL the link lands on (login and signup alike).
            expiry_minutes: How long the emailed link stays valid.

        Returns:
            SendResult with success status and user info.
        """
        ...

    async def exchange_magic_link_token(
        self,
        token: str,
        session_duration_minutes: int,
    ) -> AuthResult:
        """Exchange a magic link token for a session.

        Args:
            token: The token from the callback URL.
            session_duration_minutes: Lifetime of the session to issue.

        Returns:
            AuthResult with session info if successful.
        """
        ...

    async def start_oauth_redirect(
        self,
        provider: str,
        return_url: str,
    ) -> OAuthStartResult:
        """Prepare the redirect to a provider's consent screen.

        Args:
            provider: The OAuth provider (e.g., "google").
            return_url: URL to land on after login or signup.

        Returns:
            OAuthStartResult with the redirect URL.
        """
        ...

    async def exchange_oauth_token(
        self,
        token: str,
        session_duration_minutes: int,
    ) -> AuthResult:
        """Exchange an OAuth token from the provider callback for a session.

        Args:
            token: The OAuth token from the callback URL.
            session_duration_minutes: Lifetime of the session to issue.

        Returns:
            AuthResult with session info if successful.
        """
        ...

    async def revoke_session(self) -> RevokeResult:
        """Revoke the stored session with the provider and forget it locally."""
        ...

    def get_current_user(self) -> UserProfile | None:
        """Return the stored user projection, or None when signed out."""
        ...
