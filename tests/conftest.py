"""
Shared test fixtures for the car-rental API test suite.

Every test runs against its own in-memory SQLite database (aiosqlite +
AsyncSession) with roles seeded and foreign keys enforced.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from carrental.api.v1.deps import get_db
from carrental.core.security import create_token_from_user, encrypt_password
from carrental.db.init_db import create_tables, seed_roles
from carrental.db.session import build_engine, build_session_factory
from carrental.main import app
from carrental.models.car import Car
from carrental.models.role import ADMIN, CUSTOMER
from carrental.models.user import User


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh database per test, wired into the app's ``get_db`` dependency."""
    engine = build_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    factory = build_session_factory(engine)

    await create_tables(engine)
    async with factory() as session:
        await seed_roles(session)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ── Users & tokens ──────────────────────────────────────────────────
async def _make_user(session: AsyncSession, role_name: str, email: str, password: str) -> str:
    roles = await seed_roles(session)
    role = roles[role_name]
    user = User(
        name=email.split("@")[0].title(),
        email=email,
        encrypted_password=encrypt_password(password),
        role_id=role.id,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return create_token_from_user(user, role)


@pytest.fixture
async def admin_headers(db_session: AsyncSession) -> dict[str, str]:
    token = await _make_user(db_session, ADMIN, "admin@bcr.test", "admin-password")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def customer_headers(db_session: AsyncSession) -> dict[str, str]:
    token = await _make_user(db_session, CUSTOMER, "johnny@bcr.test", "customer-password")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def car(db_session: AsyncSession) -> Car:
    car = Car(
        name="Toyota GT86",
        price=500000,
        size="MEDIUM",
        image="https://images.unsplash.com/photo-1656337043211-15eae0dcaf63",
        is_currently_rented=False,
    )
    db_session.add(car)
    await db_session.commit()
    await db_session.refresh(car)
    return car
