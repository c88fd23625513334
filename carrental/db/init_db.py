"""
Schema creation and reference-data seeding run at startup.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from carrental.core.config import settings
from carrental.core.security import encrypt_password
from carrental.db.base import Base
from carrental.models.car import Car, UserCar  # noqa: F401
from carrental.models.role import ADMIN, ROLE_NAMES, Role
from carrental.models.user import User

logger = logging.getLogger(__name__)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")


async def seed_roles(session: AsyncSession) -> dict[str, Role]:
    """Insert any missing role rows and return all roles by name."""
    result = await session.execute(select(Role))
    roles = {role.name: role for role in result.scalars()}
    missing = [name for name in ROLE_NAMES if name not in roles]
    for name in missing:
        role = Role(name=name)
        session.add(role)
        roles[name] = role
    if missing:
        await session.commit()
        logger.info("Seeded roles: %s", ", ".join(missing))
    return roles


async def seed_admin(session: AsyncSession, admin_role: Role) -> None:
    """Create the default admin account on first run."""
    result = await session.execute(select(User).where(User.email == settings.FIRST_ADMIN_EMAIL))
    if result.scalar_one_or_none() is not None:
        return
    session.add(
        User(
            name=settings.FIRST_ADMIN_NAME,
            email=settings.FIRST_ADMIN_EMAIL,
            encrypted_password=encrypt_password(settings.FIRST_ADMIN_PASSWORD),
            role_id=admin_role.id,
        )
    )
    await session.commit()
    logger.info("Default admin created: %s (password: <redacted>)", settings.FIRST_ADMIN_EMAIL)


async def init_db(engine: AsyncEngine, session: AsyncSession) -> None:
    await create_tables(engine)
    roles = await seed_roles(session)
    await seed_admin(session, roles[ADMIN])
