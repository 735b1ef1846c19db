"""
mutamba_erp.session.context

Session/Access Context.

Responsibilities:
- Subscribe to the identity provider and derive `{identity, role, loading}` from
  every auth-state notification via the Role Resolver.
- Publish derived state to listeners in notification order: a notification whose
  `seq` is not newer than the last one seen is dropped, and a role resolution
  that finishes after a newer notification arrived is discarded.
- Delegate sign-out to the provider; state only clears when the resulting
  notification arrives.

Must be started from inside a running event loop: resolutions run as tasks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

from mutamba_erp.auth.models import AuthStateChange, Identity, Role
from mutamba_erp.errors import DirectoryUnavailable
from mutamba_erp.observability.logging import get_logger
from mutamba_erp.rbac.resolver import RoleResolver
from mutamba_erp.session.protocols import IdentityProvider

log = get_logger(__name__)

StateListener = Callable[["AccessState"], None]


@dataclass(frozen=True, slots=True)
class AccessState:
    """
    `loading` is True only until the first notification is handled. When
    `loading` is False, `role` is set iff `identity` is set.

    `error` is set when the role could not be resolved; the state is then
    published as signed-out so nothing renders with a guessed role.
    """

    identity: Identity | None = None
    role: Role | None = None
    loading: bool = True
    error: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.admin


class AccessContext:
    def __init__(self, *, provider: IdentityProvider, resolver: RoleResolver) -> None:
        self._provider = provider
        self._resolver = resolver
        self._state = AccessState()
        self._listeners: list[StateListener] = []
        self._unsubscribe: Callable[[], None] | None = None
        self._closed = False

        self._last_seq = 0
        self._generation = 0
        self._identity: Identity | None = None
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def state(self) -> AccessState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)
        listener(self._state)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> None:
        if self._unsubscribe is not None or self._closed:
            raise RuntimeError("access context already started")
        self._unsubscribe = self._provider.on_auth_state_changed(self._on_auth_state_changed)

    async def sign_out(self) -> None:
        await self._provider.sign_out()

    async def refresh(self) -> None:
        """Re-resolve the role of the newest identity (e.g. after a role change)."""
        if self._closed or self._identity is None:
            return
        generation = self._next_generation()
        await self._spawn(self._identity, generation)

    async def settle(self) -> None:
        """Wait until no resolution is in flight."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._closed = True
        self._listeners.clear()
        # In-flight resolutions finish but can no longer publish.
        await self.settle()

    def _on_auth_state_changed(self, change: AuthStateChange) -> None:
        if self._closed:
            return
        if change.seq <= self._last_seq:
            log.info("auth_change_out_of_order", seq=change.seq, newest=self._last_seq)
            return
        self._last_seq = change.seq
        self._identity = change.identity
        generation = self._next_generation()

        if change.identity is None:
            self._publish(AccessState(loading=False))
            return
        self._spawn(change.identity, generation)

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _spawn(self, identity: Identity, generation: int) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(self._resolve(identity, generation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _resolve(self, identity: Identity, generation: int) -> None:
        try:
            role = await self._resolver.resolve(identity)
        except Exception as e:
            if not self._is_current(generation):
                return
            if isinstance(e, DirectoryUnavailable):
                log.warning("access_resolution_failed", uid=identity.uid, error=e.message)
                message = e.message
            else:
                log.error("access_resolution_failed", uid=identity.uid, exc_info=True)
                message = str(e) or type(e).__name__
            self._publish(AccessState(loading=False, error=message))
            return

        if not self._is_current(generation):
            log.info("access_resolution_discarded", uid=identity.uid, generation=generation)
            return
        self._publish(AccessState(identity=identity, role=role, loading=False))

    def _publish(self, state: AccessState) -> None:
        self._state = state
        log.debug(
            "access_state_published",
            uid=state.identity.uid if state.identity else None,
            role=state.role.value if state.role else None,
        )
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                log.error("access_listener_failed", exc_info=True)


# --- Module Notes -----------------------------------------------------------
# Role writes to the directory are not pushed to the client; callers that change
# roles (or suspect a change) call `refresh()`.
