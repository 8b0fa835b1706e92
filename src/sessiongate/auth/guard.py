"""Route guard for protected pages.

The guard trusts the store's last-known value. It never awaits and never
contacts the identity provider, so navigation is not held up by a network
round-trip.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sessiongate.auth.state import AuthStateStore

logger = logging.getLogger(__name__)


class RouteGuard:
    """Allow-or-redirect predicate over an AuthStateStore.

    Args:
        store: The status cell to read on every evaluation.
        entry_path: Where denied navigation is sent.
    """

    def __init__(self, store: AuthStateStore, entry_path: str = "/") -> None:
        self._store = store
        self.entry_path = entry_path

    def allows(self) -> bool:
        return self._store.get()

    def check(self, navigate: Callable[[str], object]) -> bool:
        """Evaluate the guard, redirecting to the entry page when denied.

        Args:
            navigate: Router callback, e.g. ``ui.navigate.to``.

        Returns:
            True if navigation into the protected view may proceed.
        """
        if self.allows():
            return True
        logger.info("Guard denied navigation, redirecting to %s", self.entry_path)
        navigate(self.entry_path)
        return False
