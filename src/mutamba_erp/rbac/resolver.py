"""
mutamba_erp.rbac.resolver

Role Resolver: decides the effective role of an authenticated identity.

Policy, in order:
1. No identity -> no role.
2. Identity email equals the configured super-admin address (exact, case-sensitive)
   -> admin, without touching the directory.
3. Directory entry exists with role "admin" -> admin.
4. Anything else (entry absent, role missing or unrecognized) -> user.

A directory read failure raises `DirectoryUnavailable`; it is never turned into a role.
"""

from __future__ import annotations

from mutamba_erp.auth.models import Identity, Role
from mutamba_erp.errors import DirectoryUnavailable
from mutamba_erp.observability.logging import get_logger
from mutamba_erp.rbac.protocols import DirectoryReader

log = get_logger(__name__)


class RoleResolver:
    def __init__(self, *, directory: DirectoryReader, super_admin_email: str) -> None:
        self._directory = directory
        self._super_admin_email = super_admin_email

    def is_super_admin(self, identity: Identity) -> bool:
        # An empty configured address must never match an identity without email.
        return bool(self._super_admin_email) and identity.email == self._super_admin_email

    async def resolve(self, identity: Identity | None) -> Role | None:
        if identity is None:
            return None

        if self.is_super_admin(identity):
            log.info("role_resolved", uid=identity.uid, role=Role.admin.value, source="super_admin")
            return Role.admin

        try:
            entry = await self._directory.read_one(identity.uid)
        except DirectoryUnavailable:
            log.warning("role_resolution_failed", uid=identity.uid)
            raise

        role = entry.role if entry is not None else Role.user
        log.info(
            "role_resolved",
            uid=identity.uid,
            role=role.value,
            source="directory" if entry is not None else "default",
        )
        return role
