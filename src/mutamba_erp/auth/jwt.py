"""
mutamba_erp.auth.jwt

Session-token issuing and validation.

Responsibilities:
- Issue short-lived session tokens bound to an identity's uid after sign-in.
- Decode and validate tokens with strict claim requirements (iss/aud/exp/iat/sub).
- Rebuild the caller `Identity` from a validated token.

Note:
- Tokens carry identity only. The caller's role is resolved server-side on every
  privileged call and never read from a token or request payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from mutamba_erp.auth.models import Identity
from mutamba_erp.errors import InvalidSession
from mutamba_erp.settings import Settings


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
        )


def issue_session_token(
    *,
    cfg: JwtConfig,
    identity: Identity,
    ttl: timedelta = timedelta(hours=1),
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": identity.uid,
        "email": identity.email,
        "name": identity.display_name,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_session(*, cfg: JwtConfig, token: str) -> Identity:
    try:
        payload = jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={"require": ["exp", "iat", "iss", "aud", "sub"]},
        )
    except InvalidTokenError as e:
        raise InvalidSession(str(e)) from e

    uid = str(payload.get("sub") or "")
    if not uid:
        raise InvalidSession("token subject is empty")
    return Identity(
        uid=uid,
        email=str(payload.get("email") or ""),
        display_name=str(payload.get("name") or ""),
    )


# --- Module Notes -----------------------------------------------------------
# Issued by `identity.service.IdentityService.sign_in`, validated by `auth.deps`.
