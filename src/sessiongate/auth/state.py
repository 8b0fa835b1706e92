"""Observable authentication status.

AuthStateStore holds the one boolean every view and the route guard read.
Subscribers get the current value as soon as they subscribe and then every
change, in the order ``set`` calls complete.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeAlias

logger = logging.getLogger(__name__)

AuthObserver: TypeAlias = Callable[[bool], None]


class AuthStateStore:
    """In-memory broadcast cell for the authenticated flag."""

    def __init__(self, authenticated: bool = False) -> None:
        self._authenticated = authenticated
        self._observers: list[AuthObserver] = []

    def get(self) -> bool:
        return self._authenticated

    def set(self, authenticated: bool) -> None:
        """Overwrite the status and notify subscribers in subscription order."""
        self._authenticated = authenticated
        logger.debug("Auth status set to %s", authenticated)
        # Snapshot: observers may unsubscribe while being notified
        for observer in list(self._observers):
            self._notify(observer, authenticated)

    def subscribe(self, observer: AuthObserver) -> Callable[[], None]:
        """Register an observer and replay the current value to it.

        Returns:
            A handle that removes the observer; calling it again is a no-op.
        """
        self._observers.append(observer)
        self._notify(observer, self._authenticated)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._observers)

    @staticmethod
    def _notify(observer: AuthObserver, authenticated: bool) -> None:
        try:
            observer(authenticated)
        except Exception:
            logger.exception("Auth status observer %r failed", observer)
