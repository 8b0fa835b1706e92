"""Login and logout flows.

AuthFlowCoordinator drives the startup session check, the magic link send,
the OAuth start and logout against an identity provider client, and is the
only writer of the AuthStateStore outside the callback page.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sessiongate.auth.errors import ProviderError, StateInconsistency, ValidationError
from sessiongate.auth.models import OAuthProvider

if TYPE_CHECKING:
    from sessiongate.auth.models import UserProfile
    from sessiongate.auth.protocol import IdentityProviderProtocol
    from sessiongate.auth.state import AuthStateStore

logger = logging.getLogger(__name__)

_SEND_FAILED = "Failed to send magic link. Please try again."
_OAUTH_FAILED = "Failed to start {provider} login. Please try again."


def parse_oauth_provider(provider: str | OAuthProvider) -> OAuthProvider:
    """Coerce a provider name to OAuthProvider.

    Raises:
        ValidationError: If the name is not one of the offered providers.
    """
    try:
        return OAuthProvider(provider)
    except ValueError:
        msg = f"Unsupported OAuth provider: {provider}"
        raise ValidationError(msg) from None


def _log_inconsistency(action: str, exc: Exception) -> None:
    """Log a swallowed client failure as a StateInconsistency."""
    inconsistency = StateInconsistency(f"{action} failed: {exc}")
    inconsistency.__cause__ = exc
    logger.error("%s", inconsistency.message, exc_info=inconsistency)


class AuthFlowCoordinator:
    """Orchestrates the entry flows and logout for one browser.

    Args:
        client: Identity provider client holding this browser's session.
        store: The status cell the guard and views read.
        callback_url: Absolute URL of the callback route.
        magic_link_expiry_minutes: Validity of emailed links.
        session_duration_minutes: Lifetime of sessions issued on callback.
    """

    def __init__(
        self,
        client: IdentityProviderProtocol,
        store: AuthStateStore,
        *,
        callback_url: str,
        magic_link_expiry_minutes: int = 60,
        session_duration_minutes: int = 60,
    ) -> None:
        self.client = client
        self.store = store
        self.callback_url = callback_url
        self.magic_link_expiry_minutes = magic_link_expiry_minutes
        self.session_duration_minutes = session_duration_minutes

    def check_existing_session(self) -> bool:
        """Set the status from the provider's stored session.

        Never raises: a failing check leaves the user unauthenticated.

        Returns:
            The status after the check.
        """
        try:
            session = self.client.get_local_session()
        except Exception as exc:
            _log_inconsistency("Session check", exc)
            self.store.set(False)
            return False

        authenticated = session is not None
        logger.debug("Existing session found: %s", authenticated)
        self.store.set(authenticated)
        return authenticated

    async def send_magic_link(self, email: str) -> None:
        """Email a one-time login link pointing at the callback route.

        The status is not changed: the user is invited, not yet signed in.

        Raises:
            ValidationError: If the email is empty.
            ProviderError: If the provider could not send the link.
        """
        email = (email or "").strip()
        if not email:
            msg = "Please enter your email"
            raise ValidationError(msg)

        logger.info("Magic link requested for email=%s", email)
        try:
            result = await self.client.send_magic_link(
                email=email,
                return_url=self.callback_url,
                expiry_minutes=self.magic_link_expiry_minutes,
            )
        except Exception as exc:
            logger.exception("Error sending magic link")
            raise ProviderError(str(exc) or _SEND_FAILED) from exc
        if not result.success:
            logger.warning("Magic link failed: %s", result.error_type or result.error)
            raise ProviderError(result.error or _SEND_FAILED, result.error_type)
        logger.info("Magic link sent successfully to %s", email)

    async def start_oauth(self, provider: str | OAuthProvider) -> str:
        """Prepare the full-page redirect to the provider's consent screen.

        The callback route is both the login and the signup return target.
        The caller navigates to the returned URL; nothing is left pending.

        Returns:
            The provider consent URL.

        Raises:
            ValidationError: If the provider is not offered.
            ProviderError: If the redirect could not be prepared.
        """
        oauth_provider = parse_oauth_provider(provider)
        logger.info("Starting %s OAuth, callback=%s", oauth_provider, self.callback_url)

        fallback = _OAUTH_FAILED.format(provider=oauth_provider.value.title())
        try:
            result = await self.client.start_oauth_redirect(
                provider=oauth_provider.value,
                return_url=self.callback_url,
            )
        except Exception as exc:
            logger.exception("Error starting %s OAuth", oauth_provider)
            raise ProviderError(str(exc) or fallback) from exc
        if not result.success or not result.redirect_url:
            logger.warning("%s OAuth start failed: %s", oauth_provider, result.error)
            raise ProviderError(result.error or fallback)
        return result.redirect_url

    async def logout(self) -> None:
        """Revoke the session, then mark the user signed out regardless.

        Never raises.
        """
        try:
            result = await self.client.revoke_session()
        except Exception as exc:
            _log_inconsistency("Session revoke", exc)
        else:
            if not result.success:
                logger.warning(
                    "Session revoke rejected by provider: %s",
                    result.error_type or result.error,
                )
        self.store.set(False)
        logger.info("Logged out")

    def current_user(self) -> UserProfile | None:
        """Return the signed-in user's profile, or None if unavailable."""
        try:
            return self.client.get_current_user()
        except Exception:
            logger.exception("Error getting user")
            return None
