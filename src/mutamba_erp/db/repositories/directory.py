"""
mutamba_erp.db.repositories.directory

SQL-backed user directory (`usuarios`).

Responsibilities:
- Read one entry by uid, decoded into a `DirectoryEntry` (role fail-closed).
- Create-or-merge one entry from document-shaped fields.
- List entries for the user administration screen.
- Report storage failures as `DirectoryUnavailable`.

Writes commit immediately: each directory write is its own unit, independent of
any identity-provider write that preceded it.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mutamba_erp.auth.models import DirectoryEntry, decode_role
from mutamba_erp.db.models import DirectoryRecord
from mutamba_erp.errors import DirectoryUnavailable
from mutamba_erp.observability.logging import get_logger

log = get_logger(__name__)

# Document field -> column
_FIELDS = {"nome": "nome", "email": "email", "role": "role", "dataCriacao": "data_criacao"}


def _to_entry(record: DirectoryRecord) -> DirectoryEntry:
    return DirectoryEntry(
        uid=record.uid,
        nome=record.nome,
        email=record.email,
        role=decode_role(record.role),
        data_criacao=record.data_criacao,
    )


class DirectoryRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def read_one(self, uid: str) -> DirectoryEntry | None:
        try:
            record = await self._session.get(DirectoryRecord, uid, populate_existing=True)
        except SQLAlchemyError as e:
            log.warning("directory_read_failed", uid=uid, error=str(e))
            raise DirectoryUnavailable(f"directory read failed for {uid}") from e
        return _to_entry(record) if record is not None else None

    async def write_one(self, uid: str, fields: Mapping[str, Any]) -> None:
        unknown = set(fields) - set(_FIELDS)
        if unknown:
            raise ValueError(f"unknown directory fields: {sorted(unknown)}")

        try:
            record = await self._session.get(DirectoryRecord, uid)
            if record is None:
                record = DirectoryRecord(uid=uid)
                self._session.add(record)
            for key, value in fields.items():
                if key == "dataCriacao" and isinstance(value, str):
                    value = datetime.fromisoformat(value)
                setattr(record, _FIELDS[key], value)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            log.warning("directory_write_failed", uid=uid, error=str(e))
            raise DirectoryUnavailable(f"directory write failed for {uid}") from e

    async def list_entries(self, *, exclude_email: str | None = None) -> list[DirectoryEntry]:
        stmt = select(DirectoryRecord).order_by(DirectoryRecord.nome, DirectoryRecord.uid)
        if exclude_email:
            stmt = stmt.where(DirectoryRecord.email != exclude_email)
        try:
            records = (await self._session.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            raise DirectoryUnavailable("directory listing failed") from e
        return [_to_entry(r) for r in records]


# --- Module Notes -----------------------------------------------------------
# Concurrent role writes to the same uid are last-write-wins at the storage layer;
# there is no version column and no optimistic concurrency check.
