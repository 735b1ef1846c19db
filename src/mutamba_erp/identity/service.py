"""
mutamba_erp.identity.service

Identity provider service (transaction owner for the `identities` table).

Responsibilities:
- Verify email/password credentials and issue session tokens.
- Create identities for the provisioner, rejecting duplicate emails.
- Delete identities (compensation when a later directory write fails).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mutamba_erp.auth.jwt import JwtConfig, issue_session_token
from mutamba_erp.auth.models import Identity, normalize_email
from mutamba_erp.auth.passwords import hash_password, verify_password
from mutamba_erp.db.models import IdentityRecord
from mutamba_erp.db.repositories.identities import IdentityRepo
from mutamba_erp.errors import AuthFailed, EmailAlreadyExists
from mutamba_erp.observability.logging import get_logger
from mutamba_erp.settings import Settings

log = get_logger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Verified against when the email is unknown so both failure paths cost one hash.
    return hash_password("mutamba-unknown-identity")


@dataclass(frozen=True, slots=True)
class SessionGrant:
    identity: Identity
    token: str
    expires_in: int  # seconds


def _identity(record: IdentityRecord) -> Identity:
    return Identity(uid=record.uid, email=record.email, display_name=record.display_name)


class IdentityService:
    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._repo = IdentityRepo(session)

    async def sign_in(self, *, email: str, password: str) -> SessionGrant:
        record = await self._repo.get_by_email(email)
        if record is None:
            verify_password(_dummy_hash(), password)
            log.info("sign_in_rejected", reason="unknown_email")
            raise AuthFailed()
        if not verify_password(record.password_hash, password):
            log.info("sign_in_rejected", uid=record.uid, reason="bad_password")
            raise AuthFailed()

        identity = _identity(record)
        ttl = timedelta(minutes=self._settings.session_ttl_minutes)
        token = issue_session_token(
            cfg=JwtConfig.from_settings(self._settings), identity=identity, ttl=ttl
        )
        log.info("sign_in_succeeded", uid=identity.uid)
        return SessionGrant(identity=identity, token=token, expires_in=int(ttl.total_seconds()))

    async def get_by_email(self, email: str) -> Identity | None:
        record = await self._repo.get_by_email(email)
        return _identity(record) if record is not None else None

    async def create_identity(self, *, email: str, password: str, display_name: str) -> Identity:
        email = normalize_email(email)
        if await self._repo.get_by_email(email) is not None:
            raise EmailAlreadyExists(email)
        try:
            record = await self._repo.add(
                uid=uuid.uuid4().hex,
                email=email,
                password_hash=hash_password(password),
                display_name=display_name,
            )
            await self._session.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent create for the same email.
            await self._session.rollback()
            raise EmailAlreadyExists(email) from e

        log.info("identity_created", uid=record.uid)
        return _identity(record)

    async def delete_identity(self, uid: str) -> None:
        deleted = await self._repo.delete(uid)
        await self._session.commit()
        log.info("identity_deleted", uid=uid, existed=deleted)
