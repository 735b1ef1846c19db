"""
tests.conftest

Shared fixtures.

Responsibilities:
- Test settings backed by a per-test SQLite file.
- A running app (lifespan entered) and an in-process httpx client.
- In-memory fakes for the directory, identity provider and audit protocols.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from mutamba_erp.api.app import create_app
from mutamba_erp.auth.models import AuthStateChange, DirectoryEntry, Identity
from mutamba_erp.errors import DirectoryUnavailable, EmailAlreadyExists
from mutamba_erp.settings import Settings

API_KEY = "test-api-key"
SUPER_ADMIN_EMAIL = "root@mutamba.test"
SUPER_ADMIN_PASSWORD = "root-pass-1"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        log_level="WARNING",
        api_key=API_KEY,
        project_id="mutamba-test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'erp.db'}",
        super_admin_email=SUPER_ADMIN_EMAIL,
        super_admin_password=SUPER_ADMIN_PASSWORD,
        jwt_secret="test-secret",
        backend_base_url="http://test",
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx.ASGITransport does not run lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def http(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://test", headers={"x-api-key": API_KEY}
    ) as client:
        yield client


async def sign_in(http: httpx.AsyncClient, email: str, password: str) -> str:
    r = await http.post("/v1/auth/sign-in", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# --- Fakes -------------------------------------------------------------------


class FakeDirectory:
    """Dict-backed directory. `gates[uid]` blocks reads of that uid until set."""

    def __init__(self, docs: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self.docs: dict[str, dict[str, Any]] = {k: dict(v) for k, v in (docs or {}).items()}
        self.reads: list[str] = []
        self.writes: list[tuple[str, dict[str, Any]]] = []
        self.fail_reads = False
        self.fail_writes = False
        self.gates: dict[str, asyncio.Event] = {}

    async def read_one(self, uid: str) -> DirectoryEntry | None:
        self.reads.append(uid)
        if uid in self.gates:
            await self.gates[uid].wait()
        if self.fail_reads:
            raise DirectoryUnavailable("directory offline")
        doc = self.docs.get(uid)
        return DirectoryEntry.from_document(uid, doc) if doc is not None else None

    async def write_one(self, uid: str, fields: Mapping[str, Any]) -> None:
        if self.fail_writes:
            raise DirectoryUnavailable("directory offline")
        self.writes.append((uid, dict(fields)))
        self.docs.setdefault(uid, {}).update(fields)

    def count_email(self, email: str) -> int:
        return sum(1 for d in self.docs.values() if d.get("email") == email)


class FakeIdentities:
    def __init__(self) -> None:
        self.by_email: dict[str, Identity] = {}
        self.created: list[Identity] = []
        self.deleted: list[str] = []
        self.fail_create = False
        self._ids = itertools.count(1)

    async def create_identity(self, *, email: str, password: str, display_name: str) -> Identity:
        if self.fail_create:
            raise RuntimeError("identity backend down")
        if email in self.by_email:
            raise EmailAlreadyExists(email)
        identity = Identity(uid=f"uid-{next(self._ids)}", email=email, display_name=display_name)
        self.by_email[email] = identity
        self.created.append(identity)
        return identity

    async def delete_identity(self, uid: str) -> None:
        self.deleted.append(uid)
        self.by_email = {e: i for e, i in self.by_email.items() if i.uid != uid}


class RecordingAudit:
    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    async def record(self, **event: Any) -> None:
        self.events.append(event)


class FakeIdentityProvider:
    """Test-driven notification source; `emit` delivers exactly what the test says."""

    def __init__(self) -> None:
        self.listeners: list[Callable[[AuthStateChange], None]] = []
        self.sign_out_calls = 0

    def on_auth_state_changed(
        self, listener: Callable[[AuthStateChange], None]
    ) -> Callable[[], None]:
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    async def sign_out(self) -> None:
        self.sign_out_calls += 1

    def emit(self, seq: int, identity: Identity | None) -> None:
        for listener in list(self.listeners):
            listener(AuthStateChange(seq=seq, identity=identity))


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def identities() -> FakeIdentities:
    return FakeIdentities()


@pytest.fixture
def audit() -> RecordingAudit:
    return RecordingAudit()


@pytest.fixture
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()
