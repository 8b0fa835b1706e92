"""Error taxonomy for the login flows.

ValidationError and ProviderError reach the page that started the flow and
are shown to the user. StateInconsistency never leaves the coordinator: it is
logged and the status falls back to unauthenticated.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for authentication flow errors.

    Attributes:
        message: User-displayable description of the failure.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AuthError):
    """Caller input was missing or malformed; no provider call was made."""


class ProviderError(AuthError):
    """The identity provider reported a failure.

    Attributes:
        message: The provider's message, suitable for display.
        error_type: Provider error code (e.g. ``"invalid_token"``), if known.
    """

    def __init__(self, message: str, error_type: str | None = None) -> None:
        super().__init__(message)
        self.error_type = error_type


class StateInconsistency(AuthError):
    """A session check or revoke raised unexpectedly."""
