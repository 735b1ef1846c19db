"""
mutamba_erp.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer session token into the caller `Identity` (or None).
- Require an authenticated caller.
- Require an admin caller, re-resolving the role from the directory on every request.
"""

from __future__ import annotations

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mutamba_erp.api.deps import role_resolver, settings_dep
from mutamba_erp.auth.jwt import JwtConfig, decode_session
from mutamba_erp.auth.models import Identity, Role
from mutamba_erp.errors import (
    DirectoryUnavailable,
    Internal,
    InvalidSession,
    PermissionDenied,
    Unauthenticated,
)
from mutamba_erp.observability.logging import get_logger
from mutamba_erp.rbac.resolver import RoleResolver
from mutamba_erp.settings import Settings

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def get_caller(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> Identity | None:
    """
    None means "no verified session". Callable functions decide what that means
    so their precondition order stays in one place.
    """

    if creds is None or not creds.credentials:
        return None
    try:
        identity = decode_session(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except InvalidSession as e:
        log.info("session_rejected", error=str(e))
        return None

    structlog.contextvars.bind_contextvars(caller=identity.uid)
    return identity


def require_caller(caller: Identity | None = Depends(get_caller)) -> Identity:
    if caller is None:
        raise Unauthenticated()
    return caller


async def require_admin(
    caller: Identity = Depends(require_caller),
    resolver: RoleResolver = Depends(role_resolver),
) -> Identity:
    try:
        role = await resolver.resolve(caller)
    except DirectoryUnavailable as e:
        raise Internal(cause=e) from e
    if role is not Role.admin:
        raise PermissionDenied()
    return caller


# --- Module Notes -----------------------------------------------------------
# Role is never taken from the token; `require_admin` reads the directory each time.
