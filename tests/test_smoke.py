"""
tests.test_smoke

Boot-level checks: probes, and the configuration-error state when the backend
key is missing.
"""

from __future__ import annotations

import httpx
import pytest

from mutamba_erp.api.app import create_app
from mutamba_erp.settings import Settings


@pytest.mark.asyncio
async def test_health_endpoints(http: httpx.AsyncClient) -> None:
    r = await http.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = await http.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"
    assert r.headers["x-request-id"]


@pytest.mark.asyncio
async def test_unconfigured_backend_reports_configuration_error(tmp_path) -> None:
    settings = Settings(
        env="test",
        log_level="WARNING",
        api_key="",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'erp.db'}",
        super_admin_password="ignored",
    )
    app = create_app(settings=settings)
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.get("/healthz")
            assert r.status_code == 200

            r = await client.get("/readyz")
            assert r.status_code == 503
            assert r.json()["status"] == "unconfigured"

            r = await client.post(
                "/v1/auth/sign-in", json={"email": "a@b.com", "password": "secret1"}
            )
            assert r.status_code == 503
            assert r.json()["error"]["kind"] == "configuration-missing"

            r = await client.post("/v1/functions/createUser", json={"data": {}})
            assert r.status_code == 503


def test_require_backend_names_the_missing_value() -> None:
    from mutamba_erp.errors import ConfigurationMissing

    with pytest.raises(ConfigurationMissing) as exc_info:
        Settings(api_key="").require_backend()
    assert exc_info.value.setting == "MUTAMBA_API_KEY"


def test_secrets_hidden_from_repr() -> None:
    text = repr(Settings(api_key="k-123", jwt_secret="s-456", super_admin_password="p-789"))
    assert "k-123" not in text
    assert "s-456" not in text
    assert "p-789" not in text
