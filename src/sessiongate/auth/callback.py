"""Token exchange for the callback route.

A CallbackResolver is built fresh for every load of the callback page. It
reads the redirect's query parameters, picks the magic link or OAuth
exchange, and on success marks the store authenticated.

States::

    PARSING -> EXCHANGING -> SUCCEEDED
       |            |
       +------------+-----> FAILED
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from sessiongate.auth.models import CallbackParameters, PendingFlow

if TYPE_CHECKING:
    from sessiongate.auth.models import AuthResult
    from sessiongate.auth.protocol import IdentityProviderProtocol
    from sessiongate.auth.state import AuthStateStore

logger = logging.getLogger(__name__)

NO_TOKEN_MESSAGE = "No authentication token found"
INVALID_TOKEN_MESSAGE = "Invalid authentication token"
FALLBACK_MESSAGE = "Authentication failed. Please try again."

# Tokens longer than this are rejected without contacting the provider
MAX_TOKEN_LENGTH = 1000


class CallbackState(StrEnum):
    PARSING = "parsing"
    EXCHANGING = "exchanging"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class CallbackOutcome:
    """Terminal result of a callback page load.

    Attributes:
        state: SUCCEEDED or FAILED.
        message: Error to show the user; None on success.
        redirect_to: Route to navigate to; None when the page should stay.
        flow: The flow that was exchanged, if a token was present.
    """

    state: CallbackState
    message: str | None = None
    redirect_to: str | None = None
    flow: PendingFlow | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is CallbackState.SUCCEEDED


class CallbackResolver:
    """Single-use state machine for one callback page load."""

    def __init__(
        self,
        client: IdentityProviderProtocol,
        store: AuthStateStore,
        *,
        session_duration_minutes: int = 60,
        success_path: str = "/dashboard",
    ) -> None:
        self._client = client
        self._store = store
        self._session_duration_minutes = session_duration_minutes
        self._success_path = success_path
        self.state = CallbackState.PARSING
        self._outcome: CallbackOutcome | None = None

    async def resolve(self, query: Any) -> CallbackOutcome:
        """Run the exchange for the given query parameters.

        Args:
            query: Mapping with ``.get`` holding the redirect's parameters.

        Returns:
            The terminal outcome. Repeat calls return the first outcome
            without contacting the provider again.
        """
        if self._outcome is not None:
            return self._outcome

        params = CallbackParameters.from_query(query)
        if not params.token:
            logger.warning("Callback: missing token")
            return self._fail(NO_TOKEN_MESSAGE)
        if len(params.token) > MAX_TOKEN_LENGTH:
            logger.warning("Token exceeds max length: %d chars", len(params.token))
            return self._fail(INVALID_TOKEN_MESSAGE)

        flow = params.flow
        self.state = CallbackState.EXCHANGING
        logger.debug("Exchanging %s token (length=%d)", flow, len(params.token))

        try:
            result = await self._exchange(flow, params.token)
        except Exception as exc:
            logger.exception("Authentication error during %s exchange", flow)
            return self._fail(str(exc) or FALLBACK_MESSAGE, flow)

        if not result.success:
            logger.warning("%s exchange failed: %s", flow, result.error_type)
            return self._fail(result.error or FALLBACK_MESSAGE, flow)

        self._store.set(True)
        self.state = CallbackState.SUCCEEDED
        logger.info("Login successful via %s", flow)
        self._outcome = CallbackOutcome(
            state=self.state,
            redirect_to=self._success_path,
            flow=flow,
        )
        return self._outcome

    async def _exchange(self, flow: PendingFlow, token: str) -> AuthResult:
        if flow.is_oauth:
            return await self._client.exchange_oauth_token(
                token=token,
                session_duration_minutes=self._session_duration_minutes,
            )
        return await self._client.exchange_magic_link_token(
            token=token,
            session_duration_minutes=self._session_duration_minutes,
        )

    def _fail(self, message: str, flow: PendingFlow | None = None) -> CallbackOutcome:
        self.state = CallbackState.FAILED
        self._outcome = CallbackOutcome(state=self.state, message=message, flow=flow)
        return self._outcome
