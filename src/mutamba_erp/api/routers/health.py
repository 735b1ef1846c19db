"""
mutamba_erp.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`): backend configured and DB reachable.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from mutamba_erp.api.deps import db_session, settings_dep
from mutamba_erp.settings import Settings

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz", response_model=None)
async def readyz(
    settings: Settings = Depends(settings_dep),
    session: AsyncSession = Depends(db_session),
) -> dict[str, str] | JSONResponse:
    if not settings.backend_configured:
        return JSONResponse(
            status_code=HTTP_503_SERVICE_UNAVAILABLE, content={"status": "unconfigured"}
        )
    await session.execute(text("SELECT 1"))
    return {"status": "ready"}
