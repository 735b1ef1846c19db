"""
mutamba_erp.provisioning.service

Privileged User Provisioner.

Responsibilities:
- Authorize every call independently: verified caller session, then the caller's
  role re-resolved from the directory. Client-side role state is never consulted.
- Create an identity and its directory entry (`create_user`).
- Change a directory entry's role (`set_user_role`).
- Map failures to callable-function error kinds.

Preconditions are checked in order and the first failure wins:
unauthenticated -> permission-denied -> invalid-argument. A denied call performs
no writes.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from mutamba_erp.auth.models import Identity, Role, parse_role
from mutamba_erp.errors import (
    AlreadyExists,
    DirectoryUnavailable,
    EmailAlreadyExists,
    Internal,
    InvalidArgument,
    PermissionDenied,
    Unauthenticated,
)
from mutamba_erp.observability.logging import get_logger
from mutamba_erp.provisioning.models import (
    CreateUserPayload,
    ProvisionResult,
    RoleChangeResult,
    SetUserRolePayload,
)
from mutamba_erp.provisioning.protocols import AuditSink, IdentityAdmin
from mutamba_erp.rbac.protocols import DirectoryWriter
from mutamba_erp.rbac.resolver import RoleResolver

log = get_logger(__name__)


class UserProvisioner:
    def __init__(
        self,
        *,
        resolver: RoleResolver,
        identities: IdentityAdmin,
        directory: DirectoryWriter,
        audit: AuditSink | None = None,
    ) -> None:
        self._resolver = resolver
        self._identities = identities
        self._directory = directory
        self._audit = audit

    async def _authorize(self, caller: Identity | None, operation: str) -> Identity:
        if caller is None:
            log.info("provisioning_denied", operation=operation, reason="unauthenticated")
            raise Unauthenticated()

        try:
            role = await self._resolver.resolve(caller)
        except DirectoryUnavailable as e:
            # Cannot prove the caller is admin; deny as an internal failure.
            raise Internal(cause=e) from e

        if role is not Role.admin:
            log.info(
                "provisioning_denied",
                operation=operation,
                caller=caller.uid,
                reason="not_admin",
            )
            raise PermissionDenied()
        return caller

    async def create_user(
        self, caller: Identity | None, data: Mapping[str, Any]
    ) -> ProvisionResult:
        admin = await self._authorize(caller, "createUser")

        try:
            payload = CreateUserPayload.model_validate(data)
        except ValidationError as e:
            raise InvalidArgument("Nome, e-mail e senha são obrigatórios.") from e
        if not payload.email.strip() or not payload.password or not payload.nome.strip():
            raise InvalidArgument("Nome, e-mail e senha são obrigatórios.")
        try:
            role = parse_role(payload.role) if payload.role is not None else Role.user
        except ValueError as e:
            raise InvalidArgument("Permissão inválida.") from e

        # Step (a): identity provider.
        try:
            identity = await self._identities.create_identity(
                email=payload.email,
                password=payload.password,
                display_name=payload.nome,
            )
        except EmailAlreadyExists as e:
            log.info("provisioning_conflict", caller=admin.uid)
            raise AlreadyExists() from e
        except Exception as e:
            log.error("provisioning_failed", caller=admin.uid, step="identity", exc_info=True)
            raise Internal("Ocorreu um erro ao criar o usuário.", cause=e) from e

        # Step (b): directory entry. No atomicity with step (a); compensate on failure.
        try:
            await self._directory.write_one(
                identity.uid,
                {
                    "nome": payload.nome,
                    "email": identity.email,
                    "role": role.value,
                    "dataCriacao": datetime.now(tz=UTC),
                },
            )
        except Exception as e:
            log.error("provisioning_failed", caller=admin.uid, uid=identity.uid, step="directory")
            await self._compensate(identity)
            raise Internal("Ocorreu um erro ao criar o usuário.", cause=e) from e

        log.info("user_provisioned", caller=admin.uid, uid=identity.uid, role=role.value)
        await self._record(
            actor=admin.uid,
            event_type="USER_PROVISIONED",
            subject_uid=identity.uid,
            details={"email": identity.email, "role": role.value},
        )
        return ProvisionResult(
            result=f"Usuário {payload.nome} ({identity.email}) criado com sucesso.",
            uid=identity.uid,
        )

    async def _compensate(self, identity: Identity) -> None:
        try:
            await self._identities.delete_identity(identity.uid)
        except Exception:
            # The identity is now orphaned (no directory entry); it resolves to `user`.
            log.error("provisioning_compensation_failed", uid=identity.uid, exc_info=True)
        else:
            log.warning("provisioning_compensated", uid=identity.uid)

    async def _record(self, **event: Any) -> None:
        if self._audit is None:
            return
        try:
            await self._audit.record(**event)
        except Exception:
            # The user change is already committed; a lost audit row must not fail the call.
            log.error("audit_record_failed", event_type=event["event_type"], exc_info=True)

    async def set_user_role(
        self, caller: Identity | None, data: Mapping[str, Any]
    ) -> RoleChangeResult:
        admin = await self._authorize(caller, "setUserRole")

        try:
            payload = SetUserRolePayload.model_validate(data)
            role = parse_role(payload.role)
        except (ValidationError, ValueError) as e:
            raise InvalidArgument("Usuário e permissão são obrigatórios.") from e
        if not payload.uid:
            raise InvalidArgument("Usuário e permissão são obrigatórios.")
        if payload.uid == admin.uid:
            raise InvalidArgument("Você não pode alterar sua própria permissão.")

        try:
            entry = await self._directory.read_one(payload.uid)
            if entry is None:
                raise InvalidArgument("Usuário não encontrado.")
            # Last write wins against concurrent role changes.
            await self._directory.write_one(payload.uid, {"role": role.value})
        except DirectoryUnavailable as e:
            raise Internal("Ocorreu um erro ao alterar a permissão.", cause=e) from e

        log.info(
            "role_changed",
            caller=admin.uid,
            uid=payload.uid,
            previous=entry.role.value,
            role=role.value,
        )
        await self._record(
            actor=admin.uid,
            event_type="ROLE_CHANGED",
            subject_uid=payload.uid,
            details={"previous": entry.role.value, "role": role.value},
        )
        return RoleChangeResult(
            result=f"Permissão de {entry.nome or entry.email} alterada para {role.value}.",
            uid=payload.uid,
            role=role.value,
        )


# --- Module Notes -----------------------------------------------------------
# Orphaned identities (compensation failed) have no directory entry and therefore
# resolve to `user`; a retry of createUser for the same email reports already-exists.
