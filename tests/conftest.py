"""
Shared fixtures for all tests.

Uses an in-memory SQLite database so tests are isolated and fast.
"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.db.base import Base
from app.db.session import get_db
from app.models import Qube, Zone  # noqa: F401
from app.repositories.qube_repository import QubeRepository
from app.repositories.zone_repository import ZoneRepository
from app.services.qube_service import QubeService
from app.services.zone_service import ZoneService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# --- Fixtures ---


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    engine = create_async_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def zone_repo(test_session: AsyncSession) -> ZoneRepository:
    return ZoneRepository(test_session)


@pytest_asyncio.fixture(scope="function")
async def qube_repo(test_session: AsyncSession) -> QubeRepository:
    return QubeRepository(test_session)


@pytest_asyncio.fixture(scope="function")
async def zone_service(zone_repo: ZoneRepository, qube_repo: QubeRepository) -> ZoneService:
    return ZoneService(zone_repo, qube_repo)


@pytest_asyncio.fixture(scope="function")
async def qube_service(qube_repo: QubeRepository, zone_repo: ZoneRepository) -> QubeService:
    return QubeService(qube_repo, zone_repo)


@pytest_asyncio.fixture(scope="function")
async def client(test_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Return an HTTPX AsyncClient wired to the test app with an in-memory DB."""
    from app.main import create_app

    test_app = create_app()

    # Override DB session dependency
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield test_session

    test_app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as ac:
        yield ac

    test_app.dependency_overrides.clear()
