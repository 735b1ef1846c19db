"""
mutamba_erp.db.init_db

DB initialization helpers (dev/test convenience). Production uses Alembic.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from mutamba_erp.db import models  # noqa: F401  # register tables on Base.metadata
from mutamba_erp.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
