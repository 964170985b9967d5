"""Shared fixtures: an in-memory database, a seeded RNG and an HTTP client."""

import random
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from secretsanta.domain.services import GroupLocks, GroupService
from secretsanta.infrastructure.persistence import models  # noqa: F401
from secretsanta.infrastructure.persistence.database import Base, get_db_session


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session on a fresh in-memory SQLite schema, dropped after the test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    make_session = async_sessionmaker(engine, expire_on_commit=False)
    async with make_session() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so draws are reproducible."""
    return random.Random(2024)


@pytest.fixture
def group_service(db_session: AsyncSession, rng: random.Random) -> GroupService:
    """Group service over the test database with its own lock registry."""
    return GroupService(db_session, locks=GroupLocks(), rng=rng)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the app, with requests served from ``db_session``."""
    from secretsanta.infrastructure.api.app import app

    app.dependency_overrides[get_db_session] = lambda: db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
