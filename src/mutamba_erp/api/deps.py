"""
mutamba_erp.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide the app's settings and request-scoped DB sessions.
- Build request-scoped services (identity provider, directory, resolver, provisioner).
- Gate routes on the backend being configured and the caller presenting the API key.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mutamba_erp.db.repositories.audit import AuditRepo
from mutamba_erp.db.repositories.directory import DirectoryRepo
from mutamba_erp.errors import Unauthenticated
from mutamba_erp.identity.service import IdentityService
from mutamba_erp.provisioning.service import UserProvisioner
from mutamba_erp.rbac.resolver import RoleResolver
from mutamba_erp.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Set once by `create_app`; tests pass their own Settings there.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


def require_backend(
    settings: Settings = Depends(settings_dep),
    x_api_key: str | None = Header(default=None),
) -> None:
    settings.require_backend()
    if x_api_key != settings.api_key:
        raise Unauthenticated("API key inválida.")


def directory_repo(session: AsyncSession = Depends(db_session)) -> DirectoryRepo:
    return DirectoryRepo(session)


def identity_service(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> IdentityService:
    return IdentityService(session=session, settings=settings)


def role_resolver(
    directory: DirectoryRepo = Depends(directory_repo),
    settings: Settings = Depends(settings_dep),
) -> RoleResolver:
    return RoleResolver(directory=directory, super_admin_email=settings.super_admin_email)


def user_provisioner(
    resolver: RoleResolver = Depends(role_resolver),
    identities: IdentityService = Depends(identity_service),
    directory: DirectoryRepo = Depends(directory_repo),
    session: AsyncSession = Depends(db_session),
) -> UserProvisioner:
    return UserProvisioner(
        resolver=resolver,
        identities=identities,
        directory=directory,
        audit=AuditRepo(session),
    )


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependencies per request, so the resolver, identity service and
# directory built for one request all share a single AsyncSession.
