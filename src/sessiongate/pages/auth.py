"""Authentication pages for SessionGate.

Provides the login (entry) page, the callback page the identity provider
redirects back to, and the fallback for unknown routes, using NiceGUI.
Uses either real Stytch or MockIdentityClient based on DEV__AUTH_MOCK.

Every page load builds its own coordinator around the browser's
``app.storage.user`` and runs the existing-session check first, so the
guard and views always start from the provider's stored session.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.responses import PlainTextResponse, RedirectResponse
from nicegui import app, ui

from sessiongate.auth import (
    OAuthProvider,
    ProviderError,
    ValidationError,
    build_callback_resolver,
    build_coordinator,
    get_identity_client,
)
from sessiongate.config import get_settings

if TYPE_CHECKING:
    from starlette.requests import Request

    from sessiongate.auth import AuthFlowCoordinator

logger = logging.getLogger(__name__)

# Inline login messages disappear after this many seconds
_MESSAGE_DISPLAY_SECONDS = 5.0

# NiceGUI serves its own static assets under this prefix
_FRAMEWORK_PREFIX = "/_nicegui/"

_MESSAGE_CLASSES = {
    "success": "text-green-700",
    "error": "text-red-600",
}


def start_auth_session() -> AuthFlowCoordinator:
    """Wire a coordinator for the current browser and check for a session."""
    client = get_identity_client(app.storage.user)
    coordinator = build_coordinator(client)
    coordinator.check_existing_session()
    return coordinator


class _InlineMessage:
    """Message line under the login form that clears itself."""

    def __init__(self) -> None:
        self._label = ui.label("").props('data-testid="login-message"')
        self._label.set_visibility(False)
        self._timer: ui.timer | None = None

    def show(self, text: str, kind: str) -> None:
        self._label.set_text(text)
        self._label.classes(replace=_MESSAGE_CLASSES[kind])
        self._label.set_visibility(True)
        if self._timer is not None:
            self._timer.cancel()
        self._timer = ui.timer(_MESSAGE_DISPLAY_SECONDS, self.clear, once=True)

    def clear(self) -> None:
        self._label.set_text("")
        self._label.set_visibility(False)


def _build_magic_link_section(
    coordinator: AuthFlowCoordinator,
    message: _InlineMessage,
) -> None:
    """Build the magic link login section."""
    with ui.card().classes("w-96 p-4"):
        ui.label("Email Magic Link").classes("text-lg font-semibold mb-2")

        email_input = (
            ui.input(label="Email address", placeholder="you@example.com")
            .props('data-testid="email-input"')
            .classes("w-full")
        )

        async def send_magic_link() -> None:
            button.disable()
            try:
                await coordinator.send_magic_link(email_input.value)
            except ValidationError as exc:
                message.show(exc.message, "error")
            except ProviderError as exc:
                logger.error("Error sending magic link: %s", exc.message)
                message.show(
                    f"Failed to send magic link. Please try again. ({exc.message})",
                    "error",
                )
            else:
                message.show("Magic link sent! Check your email.", "success")
                email_input.set_value("")
            finally:
                button.enable()

        button = (
            ui.button("Send Magic Link", on_click=send_magic_link)
            .props('data-testid="send-magic-link-btn"')
            .classes("mt-2")
        )


def _build_oauth_section(
    coordinator: AuthFlowCoordinator,
    message: _InlineMessage,
) -> None:
    """Build the Google and Microsoft login buttons."""
    with ui.card().classes("w-96 p-4"):
        for provider in OAuthProvider:
            label = provider.value.title()

            async def start_oauth(p: OAuthProvider = provider, name: str = label) -> None:
                logger.info("%s OAuth login button clicked", name)
                try:
                    redirect_url = await coordinator.start_oauth(p)
                except (ValidationError, ProviderError) as exc:
                    logger.error("Error with %s login: %s", name, exc.message)
                    message.show(
                        f"Failed to login with {name}. Please try again.", "error"
                    )
                    return
                ui.navigate.to(redirect_url)

            ui.button(f"Continue with {label}", on_click=start_oauth).props(
                f'data-testid="{provider.value}-login-btn"'
            ).classes("w-full mb-1")


@ui.page("/")
async def login_page() -> None:
    """Entry page with magic link and OAuth options."""
    coordinator = start_auth_session()
    settings = get_settings()
    if coordinator.store.get():
        ui.navigate.to(settings.auth.protected_path)
        return

    ui.label("Login to SessionGate").classes("text-2xl font-bold mb-4")
    message = _InlineMessage()
    _build_magic_link_section(coordinator, message)
    ui.label("— or —").classes("my-4")
    _build_oauth_section(coordinator, message)


@ui.page("/authenticate")
async def authenticate_page() -> None:
    """Exchange the callback token and continue to the dashboard."""
    logger.info("Authentication callback received")
    coordinator = start_auth_session()
    resolver = build_callback_resolver(coordinator)

    status = ui.label("Authenticating...").classes("text-xl")
    spinner = ui.spinner()

    request: Request = ui.context.client.request
    outcome = await resolver.resolve(request.query_params)

    if outcome.succeeded and outcome.redirect_to:
        ui.navigate.to(outcome.redirect_to)
        return

    spinner.set_visibility(False)
    status.set_text("Authentication failed")
    ui.label(outcome.message or "").classes("text-red-500").props(
        'data-testid="auth-error"'
    )
    ui.link("Back to login", get_settings().auth.entry_path)


@app.exception_handler(404)
async def redirect_unknown_route(
    request: Request, exc: Exception
) -> RedirectResponse | PlainTextResponse:
    """Send any unknown page route back to the entry page.

    Missing framework assets under /_nicegui keep a plain 404.
    """
    if request.url.path.startswith(_FRAMEWORK_PREFIX):
        return PlainTextResponse("Not Found", status_code=404)
    logger.debug("Unknown route %s, redirecting to entry page", request.url.path)
    return RedirectResponse(get_settings().auth.entry_path)
