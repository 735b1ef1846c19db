"""
mutamba_erp.provisioning.models

Request/response shapes of the provisioning operations.

Payloads are parsed only after the caller is authorized, so a malformed body from
an unauthorized caller still yields `unauthenticated`/`permission-denied`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class CreateUserPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str = ""
    password: str = ""
    nome: str = ""
    role: str | None = None


class SetUserRolePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uid: str = ""
    role: str = ""


class ProvisionResult(BaseModel):
    result: str
    uid: str


class RoleChangeResult(BaseModel):
    result: str
    uid: str
    role: str
