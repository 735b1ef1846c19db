"""
mutamba_erp.api.app

FastAPI app factory for the Mutamba ERP backend.

Responsibilities:
- Build the FastAPI application and register routers, middleware and error mapping.
- Initialize and dispose shared infrastructure (DB engine/session factory).
- Seed the super-admin identity when configured.
- Boot into a visible configuration-error state when the backend key is missing.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from mutamba_erp import __version__
from mutamba_erp.api.errors import register_error_handlers
from mutamba_erp.api.routers.auth import router as auth_router
from mutamba_erp.api.routers.directory import router as directory_router
from mutamba_erp.api.routers.functions import router as functions_router
from mutamba_erp.api.routers.health import router as health_router
from mutamba_erp.db.init_db import init_db
from mutamba_erp.db.session import create_engine, create_sessionmaker
from mutamba_erp.identity.seeder import seed_super_admin
from mutamba_erp.observability.logging import configure_logging, get_logger
from mutamba_erp.observability.middleware import RequestContextMiddleware
from mutamba_erp.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info(
            "startup",
            env=settings.env,
            project_id=settings.project_id,
            backend_configured=settings.backend_configured,
        )
        if not settings.backend_configured:
            # Routes behind `require_backend` answer 503 configuration-missing.
            log.error("backend_unconfigured", setting="MUTAMBA_API_KEY")

        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            await init_db(engine)
        if settings.backend_configured:
            await seed_super_admin(app.state.sessionmaker, settings)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Mutamba ERP",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    register_error_handlers(app)
    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(directory_router)
    app.include_router(functions_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Composition only; authorization lives in `provisioning` and `auth.deps`.
