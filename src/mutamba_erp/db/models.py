"""
mutamba_erp.db.models

Persistence schema for the backend.

Responsibilities:
- IdentityRecord: credentials and profile owned by the identity provider.
- DirectoryRecord: the `usuarios` collection (profile + role) keyed by uid.
- AuditEvent: append-only trail of privileged operations.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, Text, func
from sqlalchemy import Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from mutamba_erp.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class IdentityRecord(Base):
    __tablename__ = "identities"

    uid: Mapped[str] = mapped_column(String(64), primary_key=True)
    # Stored lower-cased; uniqueness is enforced on lower(email) below.
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    display_name: Mapped[str] = mapped_column(String(256), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )


Index("uq_identities_email_lower", func.lower(IdentityRecord.email), unique=True)


class DirectoryRecord(Base):
    """
    No foreign key to `identities`: the two stores are independent and an entry
    may exist without an identity (and vice versa).
    """

    __tablename__ = "usuarios"

    uid: Mapped[str] = mapped_column(String(64), primary_key=True)
    nome: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(320), nullable=False, default="", index=True)
    # Stored as written; decoded fail-closed by `auth.models.decode_role` on read.
    role: Mapped[str | None] = mapped_column(String(32), nullable=True)
    data_criacao: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    actor: Mapped[str] = mapped_column(String(64), nullable=False)  # caller uid
    event_type: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    subject_uid: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, index=True
    )

    __table_args__ = (Index("ix_audit_subject_created", "subject_uid", "created_at"),)


# --- Module Notes -----------------------------------------------------------
# Table name `usuarios` and the `nome`/`data_criacao` columns keep the directory
# compatible with the documents the presentation layer already reads.
