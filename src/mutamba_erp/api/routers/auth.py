"""
mutamba_erp.api.routers.auth

Identity-provider endpoints.

Responsibilities:
- Email/password sign-in returning a session token.
- Echo the identity bound to the presented session token.

Sign-out is client-side: tokens are stateless and simply discarded.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from mutamba_erp.api.deps import identity_service, require_backend
from mutamba_erp.auth.deps import require_caller
from mutamba_erp.auth.models import Identity
from mutamba_erp.identity.service import IdentityService

router = APIRouter(
    prefix="/v1/auth", tags=["auth"], dependencies=[Depends(require_backend)]
)


class SignInRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=1024)


class IdentityOut(BaseModel):
    uid: str
    email: str
    display_name: str

    @classmethod
    def of(cls, identity: Identity) -> IdentityOut:
        return cls(uid=identity.uid, email=identity.email, display_name=identity.display_name)


class SignInResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    identity: IdentityOut


@router.post("/sign-in", response_model=SignInResponse)
async def sign_in(
    body: SignInRequest,
    identities: IdentityService = Depends(identity_service),
) -> SignInResponse:
    # AuthFailed is mapped to a generic 401 by `api.errors`.
    grant = await identities.sign_in(email=body.email, password=body.password)
    return SignInResponse(
        access_token=grant.token,
        expires_in=grant.expires_in,
        identity=IdentityOut.of(grant.identity),
    )


@router.get("/session", response_model=IdentityOut)
async def current_session(caller: Identity = Depends(require_caller)) -> IdentityOut:
    return IdentityOut.of(caller)
