"""
mutamba_erp.client.functions

Typed wrappers over the backend's callable functions.

Errors surface as `FunctionError` subclasses whose `message` is meant to be shown
verbatim to the admin who started the action.
"""

from __future__ import annotations

from mutamba_erp.auth.models import Role
from mutamba_erp.client.backend import BackendClient
from mutamba_erp.provisioning.models import ProvisionResult, RoleChangeResult


class CallableFunctions:
    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend

    async def create_user(
        self, *, email: str, password: str, nome: str, role: Role = Role.user
    ) -> ProvisionResult:
        body = await self._backend.call(
            "createUser",
            {"email": email, "password": password, "nome": nome, "role": role.value},
        )
        return ProvisionResult.model_validate(body)

    async def set_user_role(self, *, uid: str, role: Role) -> RoleChangeResult:
        body = await self._backend.call("setUserRole", {"uid": uid, "role": role.value})
        return RoleChangeResult.model_validate(body)
