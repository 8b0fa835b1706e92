"""Protected dashboard page."""

from __future__ import annotations

import logging

from nicegui import ui

from sessiongate.auth import build_guard
from sessiongate.config import get_settings
from sessiongate.pages.auth import start_auth_session

logger = logging.getLogger(__name__)


def _detail_row(label: str, value: str, testid: str) -> None:
    with ui.row().classes("gap-2"):
        ui.label(f"{label}:").classes("font-semibold")
        ui.label(value).props(f'data-testid="{testid}"')


@ui.page("/dashboard")
async def dashboard_page() -> None:
    """Show the signed-in user; guarded by the auth status."""
    coordinator = start_auth_session()
    guard = build_guard(coordinator)
    if not guard.check(ui.navigate.to):
        return

    entry_path = get_settings().auth.entry_path

    def on_status(authenticated: bool) -> None:
        if not authenticated:
            ui.navigate.to(entry_path)

    unsubscribe = coordinator.store.subscribe(on_status)
    ui.context.client.on_disconnect(unsubscribe)

    user = coordinator.current_user()

    ui.label("Dashboard").classes("text-2xl font-bold mb-4")
    with ui.card().classes("p-4"):
        ui.label("You are logged in!").classes("text-lg mb-2")
        if user is None:
            ui.label("User details are unavailable").classes("text-gray-500")
        else:
            _detail_row("Name", user.display_name, "user-name")
            _detail_row("Email", user.display_email, "user-email")
            _detail_row("User ID", user.display_user_id, "user-id")
            _detail_row("Auth method", user.display_auth_methods, "auth-method")

    async def logout() -> None:
        # The status subscription navigates back to the entry page
        await coordinator.logout()

    ui.button("Logout", on_click=logout).props('data-testid="logout-btn"').classes(
        "mt-4"
    )
