"""
mutamba_erp.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Identity`) bound to every session.
- Define the closed `Role` type and the fail-closed decoder used at the directory boundary.
- Define the decoded `DirectoryEntry` and the auth-state notification record.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any


class Role(enum.StrEnum):
    admin = "admin"
    user = "user"


def decode_role(raw: object) -> Role:
    """
    Map a raw directory value to a Role. Only the exact string "admin" grants
    admin; anything else (missing, None, "Admin", "superuser", 1) is `user`.
    """

    return Role.admin if raw == Role.admin.value else Role.user


def parse_role(raw: object) -> Role:
    """Strict variant for request payloads: unknown values raise ValueError."""

    if not isinstance(raw, str):
        raise ValueError(f"invalid role: {raw!r}")
    return Role(raw)


def normalize_email(email: str) -> str:
    """Identity emails are compared case-insensitively and stored lower-cased."""

    return email.strip().lower()


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Authenticated principal issued by the identity provider.
    """

    uid: str
    email: str
    display_name: str = ""


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    uid: str
    nome: str
    email: str
    role: Role
    data_criacao: datetime | None = None

    @classmethod
    def from_document(cls, uid: str, doc: Mapping[str, Any]) -> DirectoryEntry:
        # Directory documents are loosely typed; decode once here.
        created = doc.get("dataCriacao")
        if isinstance(created, str):
            created = datetime.fromisoformat(created)
        return cls(
            uid=uid,
            nome=str(doc.get("nome") or ""),
            email=str(doc.get("email") or ""),
            role=decode_role(doc.get("role")),
            data_criacao=created if isinstance(created, datetime) else None,
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "nome": self.nome,
            "email": self.email,
            "role": self.role.value,
            "dataCriacao": self.data_criacao.isoformat() if self.data_criacao else None,
        }


@dataclass(frozen=True, slots=True)
class AuthStateChange:
    """
    One identity-provider notification. `seq` increases with every real change;
    `identity` is None for sign-out.
    """

    seq: int
    identity: Identity | None


# --- Module Notes -----------------------------------------------------------
# Role never travels inside a session token; it is always resolved from the directory.
