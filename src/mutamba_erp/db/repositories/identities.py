"""
mutamba_erp.db.repositories.identities

Repository for `IdentityRecord` rows.
"""

from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mutamba_erp.auth.models import normalize_email
from mutamba_erp.db.models import IdentityRecord


class IdentityRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self, *, uid: str, email: str, password_hash: str, display_name: str
    ) -> IdentityRecord:
        record = IdentityRecord(
            uid=uid,
            email=email,
            password_hash=password_hash,
            display_name=display_name,
        )
        self._session.add(record)
        await self._session.flush()
        return record

    async def get_by_email(self, email: str) -> IdentityRecord | None:
        stmt = select(IdentityRecord).where(
            func.lower(IdentityRecord.email) == normalize_email(email)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def delete(self, uid: str) -> bool:
        result = await self._session.execute(delete(IdentityRecord).where(IdentityRecord.uid == uid))
        return bool(result.rowcount)
