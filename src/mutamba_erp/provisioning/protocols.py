"""
mutamba_erp.provisioning.protocols

Identity-provider operations the provisioner needs (server-side only).
"""

from __future__ import annotations

from typing import Any, Protocol

from mutamba_erp.auth.models import Identity


class IdentityAdmin(Protocol):
    async def create_identity(self, *, email: str, password: str, display_name: str) -> Identity:
        """Raise EmailAlreadyExists when the email is taken."""
        ...

    async def delete_identity(self, uid: str) -> None: ...


class AuditSink(Protocol):
    async def record(
        self,
        *,
        actor: str,
        event_type: str,
        subject_uid: str | None,
        details: dict[str, Any],
    ) -> None: ...
