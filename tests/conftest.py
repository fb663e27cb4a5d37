"""
Pytest configuration and fixtures.
Provides an in-memory rate store, seeded rates and a test HTTP client.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from worklio.main import app
from worklio.db.base import Base
from worklio.db.session import get_db
from worklio.db.repositories.exchange_rate_repository import ExchangeRateRepository
import worklio.models  # noqa: F401


# Test database URL (in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

SEED_TIMESTAMP = datetime(2025, 10, 26, 2, 0, tzinfo=timezone.utc)

SEED_RATES = {
    "USD": Decimal("1.0"),
    "EUR": Decimal("0.92"),
    "GBP": Decimal("0.79"),
    "JPY": Decimal("150.25"),
}


@pytest.fixture(scope="function")
async def test_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def test_session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture(scope="function")
async def test_db_session(test_session_maker):
    """
    Create a test database session.
    Uses in-memory SQLite for fast tests.
    """
    async with test_session_maker() as session:
        yield session


@pytest.fixture(scope="function")
async def seeded_rates(test_db_session):
    """USD-based rates for a handful of currencies."""
    repo = ExchangeRateRepository(test_db_session)
    for code, rate in SEED_RATES.items():
        await repo.upsert("USD", code, rate, SEED_TIMESTAMP)
    await test_db_session.commit()
    return SEED_RATES


@pytest.fixture(scope="function")
async def test_client(test_db_session):
    """
    Create a test HTTP client whose requests use the test session.
    """
    async def override_get_db():
        yield test_db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_db, None)
