"""
mutamba_erp.client.identity

Client identity provider.

Responsibilities:
- Sign in/out against the backend and hold the session token.
- Notify subscribers of every auth-state change, in order, with a monotonically
  increasing `seq`. A new subscriber immediately receives the current state.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable

from mutamba_erp.auth.models import AuthStateChange, Identity
from mutamba_erp.client.backend import BackendClient
from mutamba_erp.observability.logging import get_logger

log = get_logger(__name__)

AuthListener = Callable[[AuthStateChange], None]


class ClientIdentityProvider:
    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend
        self._current: Identity | None = None
        self._listeners: list[AuthListener] = []
        self._seq = itertools.count(1)

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)
        listener(AuthStateChange(seq=next(self._seq), identity=self._current))

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_in(self, *, email: str, password: str) -> Identity:
        # AuthFailed / httpx errors propagate; callers show a generic message.
        result = await self._backend.sign_in(email=email, password=password)
        self._backend.set_session_token(result.token)
        self._current = result.identity
        log.info("signed_in", uid=result.identity.uid)
        self._emit()
        return result.identity

    async def sign_out(self) -> None:
        self._backend.set_session_token(None)
        previous, self._current = self._current, None
        log.info("signed_out", uid=previous.uid if previous else None)
        self._emit()

    def _emit(self) -> None:
        change = AuthStateChange(seq=next(self._seq), identity=self._current)
        for listener in list(self._listeners):
            listener(change)
