"""
mutamba_erp.frontend.controllers

Screen controllers: the seam between widgets and the client core.

Responsibilities:
- Login: call the identity provider and report a generic failure message.
- User administration: list users, create users and change roles through the
  callable functions, reporting the backend's message verbatim.

Admin-only checks here only decide what to render; the backend re-checks every
privileged call.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from mutamba_erp.auth.models import DirectoryEntry, Role
from mutamba_erp.client.backend import BackendClient
from mutamba_erp.client.functions import CallableFunctions
from mutamba_erp.client.identity import ClientIdentityProvider
from mutamba_erp.errors import AuthFailed, FunctionError
from mutamba_erp.observability.logging import get_logger
from mutamba_erp.session.context import AccessContext

log = get_logger(__name__)

LOGIN_FAILED_MESSAGE = AuthFailed().message
UNKNOWN_ERROR_MESSAGE = "Ocorreu um erro desconhecido."
SELF_ROLE_CHANGE_MESSAGE = "Você não pode alterar sua própria permissão."


@dataclass(slots=True)
class ActionOutcome:
    ok: bool
    message: str


class LoginController:
    def __init__(self, provider: ClientIdentityProvider) -> None:
        self._provider = provider
        self.busy = False
        self.error: str | None = None

    async def submit(self, *, email: str, password: str) -> bool:
        self.error = None
        self.busy = True
        try:
            await self._provider.sign_in(email=email, password=password)
        except (AuthFailed, httpx.HTTPError) as e:
            # Never echo provider detail on the login screen.
            log.info("login_failed", error_type=type(e).__name__)
            self.error = LOGIN_FAILED_MESSAGE
            return False
        finally:
            self.busy = False
        return True


class UsersController:
    def __init__(
        self,
        *,
        backend: BackendClient,
        functions: CallableFunctions,
        access: AccessContext,
        super_admin_email: str,
    ) -> None:
        self._backend = backend
        self._functions = functions
        self._access = access
        self._super_admin_email = super_admin_email
        self.users: list[DirectoryEntry] = []

    async def load(self) -> list[DirectoryEntry]:
        docs = await self._backend.list_directory()
        self.users = [
            DirectoryEntry.from_document(d["uid"], d)
            for d in docs
            if d.get("email") != self._super_admin_email
        ]
        return self.users

    async def _reload(self) -> None:
        # The change is already committed; a failed refresh only leaves the list stale.
        try:
            await self.load()
        except (FunctionError, httpx.HTTPError) as e:
            log.warning("users_reload_failed", error_type=type(e).__name__)

    def can_change_role(self, entry: DirectoryEntry) -> bool:
        state = self._access.state
        return state.is_admin and state.identity is not None and state.identity.uid != entry.uid

    async def change_role(self, uid: str, role: Role) -> ActionOutcome:
        identity = self._access.state.identity
        if identity is not None and identity.uid == uid:
            return ActionOutcome(ok=False, message=SELF_ROLE_CHANGE_MESSAGE)
        try:
            result = await self._functions.set_user_role(uid=uid, role=role)
        except FunctionError as e:
            return ActionOutcome(ok=False, message=e.message)
        except httpx.HTTPError:
            return ActionOutcome(ok=False, message=UNKNOWN_ERROR_MESSAGE)
        await self._reload()
        return ActionOutcome(ok=True, message=result.result)

    async def create_user(self, *, nome: str, email: str, password: str) -> ActionOutcome:
        try:
            result = await self._functions.create_user(
                email=email, password=password, nome=nome, role=Role.user
            )
        except FunctionError as e:
            return ActionOutcome(ok=False, message=e.message)
        except httpx.HTTPError:
            return ActionOutcome(ok=False, message=UNKNOWN_ERROR_MESSAGE)
        await self._reload()
        return ActionOutcome(ok=True, message=result.result)
