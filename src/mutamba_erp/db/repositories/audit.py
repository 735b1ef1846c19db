"""
mutamba_erp.db.repositories.audit

Repository for `AuditEvent` entities.

Responsibilities:
- Append audit events for privileged operations (user provisioning, role changes).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from mutamba_erp.db.models import AuditEvent


class AuditRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        actor: str,
        event_type: str,
        subject_uid: str | None,
        details: dict[str, Any],
    ) -> AuditEvent:
        # Append-only; there is no update or delete path.
        ev = AuditEvent(
            actor=actor,
            event_type=event_type,
            subject_uid=subject_uid,
            details=details,
        )
        self._session.add(ev)
        await self._session.flush()
        return ev

    async def record(
        self,
        *,
        actor: str,
        event_type: str,
        subject_uid: str | None,
        details: dict[str, Any],
    ) -> None:
        await self.add(actor=actor, event_type=event_type, subject_uid=subject_uid, details=details)
        await self._session.commit()

