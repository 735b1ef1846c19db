"""
mutamba_erp.identity.seeder

Creates the super-admin identity on first boot when a seed password is configured.
No directory entry is written: the super-admin override does not need one.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mutamba_erp.identity.service import IdentityService
from mutamba_erp.observability.logging import get_logger
from mutamba_erp.settings import Settings

log = get_logger(__name__)


async def seed_super_admin(
    session_factory: async_sessionmaker[AsyncSession], settings: Settings
) -> bool:
    if not settings.super_admin_email or not settings.super_admin_password:
        return False

    async with session_factory() as session:
        identities = IdentityService(session=session, settings=settings)
        if await identities.get_by_email(settings.super_admin_email) is not None:
            return False
        await identities.create_identity(
            email=settings.super_admin_email,
            password=settings.super_admin_password,
            display_name="Super Admin",
        )

    log.info("super_admin_seeded", email=settings.super_admin_email)
    return True
