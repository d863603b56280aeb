"""Pytest configuration and fixtures for FlockPAK tests.

Tests run against an in-memory SQLite database (aiosqlite) shared through
a StaticPool, with the Redis cache switched off.
"""

from datetime import date
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from flockpak.config import settings
from flockpak.database import Base, get_db
from flockpak.main import app
from flockpak.models import CatchSession, CrateType
from flockpak.services.catch_sessions import start_session

settings.cache_enabled = False


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Database session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Test client; every request gets its own session, as in production."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Test Data Fixtures ───────────────────────────────────────────

@pytest_asyncio.fixture
async def crate_type(db_session: AsyncSession) -> CrateType:
    """Standard 96×57×27 cm broiler crate."""
    crate = CrateType(
        name="Standard broiler crate",
        length_cm=96.0,
        width_cm=57.0,
        height_cm=27.0,
        tare_weight_kg=3.2,
    )
    db_session.add(crate)
    await db_session.commit()
    return crate


@pytest_asyncio.fixture
async def catch_session(db_session: AsyncSession, crate_type: CrateType) -> CatchSession:
    """Active, unplanned catch session."""
    result = await start_session(
        db_session,
        flock_id="flock-001",
        catch_date=date(2026, 1, 15),
        catch_team="Team A",
        crate_type_id=crate_type.id,
    )
    await db_session.commit()
    return result["session"]


@pytest_asyncio.fixture
async def planned_session(db_session: AsyncSession, crate_type: CrateType) -> CatchSession:
    """Active summer session planned for 3000 birds over 276 crates (11/crate)."""
    result = await start_session(
        db_session,
        flock_id="flock-002",
        catch_date=date(2026, 1, 15),
        target_birds=3000,
        crate_type_id=crate_type.id,
        available_crates=276,
    )
    await db_session.commit()
    return result["session"]
