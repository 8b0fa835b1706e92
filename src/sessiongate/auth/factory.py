"""Auth client factory.

Provides factory functions to get the appropriate identity provider client
based on configuration (real Stytch or mock for testing), and to wire a
coordinator, callback resolver and guard around one browser's storage.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any

from sessiongate.auth.callback import CallbackResolver
from sessiongate.auth.coordinator import AuthFlowCoordinator
from sessiongate.auth.guard import RouteGuard
from sessiongate.auth.state import AuthStateStore
from sessiongate.config import get_settings

if TYPE_CHECKING:
    from sessiongate.auth.protocol import IdentityProviderProtocol
    from sessiongate.config import Settings


def get_identity_client(
    storage: MutableMapping[str, Any],
    settings: Settings | None = None,
) -> IdentityProviderProtocol:
    """Get the appropriate identity provider client based on configuration.

    If DEV__AUTH_MOCK=true, returns MockIdentityClient.
    Otherwise, returns StytchIdentityClient with real credentials.

    Args:
        storage: Per-browser mapping the client keeps its session in.
        settings: Settings to use; defaults to ``get_settings()``.

    Returns:
        A client implementing IdentityProviderProtocol.

    Raises:
        ValueError: If stytch.project_id is empty and mock mode is disabled.
    """
    settings = settings or get_settings()

    if settings.dev.auth_mock:
        from sessiongate.auth.mock import MockIdentityClient

        return MockIdentityClient(storage)

    stytch = settings.stytch
    if not stytch.project_id:
        msg = (
            "STYTCH__PROJECT_ID is required when DEV__AUTH_MOCK is not enabled. "
            "Set STYTCH__PROJECT_ID and STYTCH__SECRET in your .env file."
        )
        raise ValueError(msg)

    from sessiongate.auth.client import StytchIdentityClient

    return StytchIdentityClient(
        project_id=stytch.project_id,
        secret=stytch.secret.get_secret_value(),
        public_token=stytch.public_token,
        storage=storage,
        environment=stytch.environment,
    )


def build_coordinator(
    client: IdentityProviderProtocol,
    settings: Settings | None = None,
    store: AuthStateStore | None = None,
) -> AuthFlowCoordinator:
    """Create a coordinator with a fresh (unauthenticated) store by default."""
    settings = settings or get_settings()
    return AuthFlowCoordinator(
        client,
        store if store is not None else AuthStateStore(),
        callback_url=settings.callback_url,
        magic_link_expiry_minutes=settings.auth.magic_link_expiry_minutes,
        session_duration_minutes=settings.auth.session_duration_minutes,
    )


def build_callback_resolver(
    coordinator: AuthFlowCoordinator,
    settings: Settings | None = None,
) -> CallbackResolver:
    """Create a single-use resolver sharing the coordinator's client and store."""
    settings = settings or get_settings()
    return CallbackResolver(
        coordinator.client,
        coordinator.store,
        session_duration_minutes=settings.auth.session_duration_minutes,
        success_path=settings.auth.protected_path,
    )


def build_guard(
    coordinator: AuthFlowCoordinator,
    settings: Settings | None = None,
) -> RouteGuard:
    settings = settings or get_settings()
    return RouteGuard(coordinator.store, entry_path=settings.auth.entry_path)
