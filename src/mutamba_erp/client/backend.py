"""
mutamba_erp.client.backend

HTTP client boundary used by the client core to talk to the backend.

Responsibilities:
- Attach the project API key and, when signed in, the session token.
- Expose sign-in, directory reads and callable-function invocation.
- Rebuild typed errors from the backend's `{"error": {"kind", "message"}}` bodies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_404_NOT_FOUND

from mutamba_erp.auth.models import Identity
from mutamba_erp.errors import AuthFailed, Internal, function_error_from_kind
from mutamba_erp.observability.logging import get_logger
from mutamba_erp.settings import Settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SignInResult:
    identity: Identity
    token: str
    expires_in: int


class BackendClient:
    """
    One instance per client process. Refuses to exist without backend configuration.
    """

    def __init__(self, *, settings: Settings, http: httpx.AsyncClient) -> None:
        settings.require_backend()
        self._settings = settings
        self._http = http
        self._token: str | None = None

    @classmethod
    def create(
        cls, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> BackendClient:
        settings.require_backend()
        http = httpx.AsyncClient(
            base_url=settings.backend_base_url,
            timeout=settings.backend_timeout_seconds,
            transport=transport,
        )
        return cls(settings=settings, http=http)

    async def aclose(self) -> None:
        await self._http.aclose()

    def set_session_token(self, token: str | None) -> None:
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = {"x-api-key": self._settings.api_key}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def sign_in(self, *, email: str, password: str) -> SignInResult:
        r = await self._http.post(
            "/v1/auth/sign-in",
            headers=self._headers(),
            json={"email": email, "password": password},
        )
        if r.status_code == HTTP_401_UNAUTHORIZED:
            raise AuthFailed()
        r.raise_for_status()
        body = r.json()
        ident = body["identity"]
        return SignInResult(
            identity=Identity(
                uid=ident["uid"], email=ident["email"], display_name=ident.get("display_name", "")
            ),
            token=body["access_token"],
            expires_in=int(body["expires_in"]),
        )

    async def get_directory_entry(self, uid: str) -> dict[str, Any] | None:
        r = await self._http.get(f"/v1/directory/usuarios/{uid}", headers=self._headers())
        if r.status_code == HTTP_404_NOT_FOUND:
            return None
        r.raise_for_status()
        return r.json()

    async def list_directory(self) -> list[dict[str, Any]]:
        r = await self._http.get("/v1/directory/usuarios", headers=self._headers())
        if r.is_error:
            raise self._function_error(r)
        return r.json()

    async def call(self, name: str, data: dict[str, Any]) -> dict[str, Any]:
        r = await self._http.post(
            f"/v1/functions/{name}", headers=self._headers(), json={"data": data}
        )
        if r.is_error:
            raise self._function_error(r)
        return r.json()

    @staticmethod
    def _function_error(r: httpx.Response) -> Exception:
        try:
            err = r.json()["error"]
            return function_error_from_kind(str(err["kind"]), str(err["message"]))
        except (ValueError, KeyError, TypeError):
            log.warning("backend_error_unparsable", status=r.status_code)
            return Internal()


# --- Module Notes -----------------------------------------------------------
# Tests inject `httpx.ASGITransport(app=...)` through `create(..., transport=...)`
# so the whole client stack runs against an in-process backend.
