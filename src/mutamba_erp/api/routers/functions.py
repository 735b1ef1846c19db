"""
mutamba_erp.api.routers.functions

Callable functions: privileged operations invoked by the client.

Responsibilities:
- Accept `{"data": {...}}` bodies and run them under the caller bound by the
  bearer session token (never an identity or role asserted in `data`).
- Delegate to `UserProvisioner`; error kinds are mapped by `api.errors`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fastapi import APIRouter, Body, Depends

from mutamba_erp.api.deps import require_backend, user_provisioner
from mutamba_erp.auth.deps import get_caller
from mutamba_erp.auth.models import Identity
from mutamba_erp.provisioning.models import ProvisionResult, RoleChangeResult
from mutamba_erp.provisioning.service import UserProvisioner

router = APIRouter(
    prefix="/v1/functions", tags=["functions"], dependencies=[Depends(require_backend)]
)


def _callable_data(body: Any) -> Mapping[str, Any]:
    # The body is not validated here: the provisioner authorizes the caller before
    # it looks at the payload, so a malformed body from an anonymous caller is
    # still `unauthenticated` and from an admin it is `invalid-argument`.
    if isinstance(body, Mapping):
        data = body.get("data")
        if isinstance(data, Mapping):
            return data
    return {}


@router.post("/createUser", response_model=ProvisionResult)
async def create_user(
    body: Any = Body(default=None),
    caller: Identity | None = Depends(get_caller),
    provisioner: UserProvisioner = Depends(user_provisioner),
) -> ProvisionResult:
    return await provisioner.create_user(caller, _callable_data(body))


@router.post("/setUserRole", response_model=RoleChangeResult)
async def set_user_role(
    body: Any = Body(default=None),
    caller: Identity | None = Depends(get_caller),
    provisioner: UserProvisioner = Depends(user_provisioner),
) -> RoleChangeResult:
    return await provisioner.set_user_role(caller, _callable_data(body))
