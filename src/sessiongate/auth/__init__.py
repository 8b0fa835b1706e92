"""Authentication module for SessionGate.

Coordinates Stytch consumer authentication for the web app:
- Magic link by email
- OAuth redirect (Google, Microsoft)
- Observable authenticated status and a route guard over it
- Mock client for testing

Usage:
    from sessiongate.auth import build_coordinator, get_identity_client

    client = get_identity_client(app.storage.user)
    coordinator = build_coordinator(client)
    coordinator.check_existing_session()

    await coordinator.send_magic_link("user@example.com")
"""

from __future__ import annotations

from sessiongate.auth.callback import CallbackOutcome, CallbackResolver, CallbackState
from sessiongate.auth.coordinator import AuthFlowCoordinator
from sessiongate.auth.errors import (
    AuthError,
    ProviderError,
    StateInconsistency,
    ValidationError,
)
from sessiongate.auth.factory import (
    build_callback_resolver,
    build_coordinator,
    build_guard,
    get_identity_client,
)
from sessiongate.auth.guard import RouteGuard
from sessiongate.auth.models import (
    CallbackParameters,
    OAuthProvider,
    PendingFlow,
    Session,
    UserProfile,
)
from sessiongate.auth.protocol import IdentityProviderProtocol
from sessiongate.auth.state import AuthStateStore

__all__ = [
    "AuthError",
    "AuthFlowCoordinator",
    "AuthStateStore",
    "CallbackOutcome",
    "CallbackParameters",
    "CallbackResolver",
    "CallbackState",
    "IdentityProviderProtocol",
    "OAuthProvider",
    "PendingFlow",
    "ProviderError",
    "RouteGuard",
    "Session",
    "StateInconsistency",
    "UserProfile",
    "ValidationError",
    "build_callback_resolver",
    "build_coordinator",
    "build_guard",
    "get_identity_client",
]
