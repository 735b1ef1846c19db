"""
mutamba_erp.api.routers.directory

Read access to the `usuarios` directory.

Responsibilities:
- Let any signed-in caller read their own entry (the client-side Role Resolver does this).
- Let admins read any entry and list all entries except the super-admin's.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from starlette.status import HTTP_404_NOT_FOUND

from mutamba_erp.api.deps import directory_repo, require_backend, role_resolver, settings_dep
from mutamba_erp.auth.deps import require_admin, require_caller
from mutamba_erp.auth.models import DirectoryEntry, Identity, Role
from mutamba_erp.db.repositories.directory import DirectoryRepo
from mutamba_erp.errors import PermissionDenied
from mutamba_erp.rbac.resolver import RoleResolver
from mutamba_erp.settings import Settings

router = APIRouter(
    prefix="/v1/directory", tags=["directory"], dependencies=[Depends(require_backend)]
)


class DirectoryEntryOut(BaseModel):
    uid: str
    nome: str
    email: str
    role: Role
    dataCriacao: str | None = None

    @classmethod
    def of(cls, entry: DirectoryEntry) -> DirectoryEntryOut:
        return cls.model_validate(entry.to_document())


@router.get("/usuarios", response_model=list[DirectoryEntryOut])
async def list_usuarios(
    _: Identity = Depends(require_admin),
    directory: DirectoryRepo = Depends(directory_repo),
    settings: Settings = Depends(settings_dep),
) -> list[DirectoryEntryOut]:
    entries = await directory.list_entries(exclude_email=settings.super_admin_email)
    return [DirectoryEntryOut.of(e) for e in entries]


@router.get("/usuarios/{uid}", response_model=DirectoryEntryOut)
async def get_usuario(
    uid: str,
    caller: Identity = Depends(require_caller),
    directory: DirectoryRepo = Depends(directory_repo),
    resolver: RoleResolver = Depends(role_resolver),
) -> DirectoryEntryOut:
    if uid != caller.uid and await resolver.resolve(caller) is not Role.admin:
        raise PermissionDenied("Apenas administradores podem consultar outros usuários.")
    entry = await directory.read_one(uid)
    if entry is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Entry not found")
    return DirectoryEntryOut.of(entry)
