"""Root conftest — shared test configuration and DB fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Settings cache cleared around each test so env overrides take effect
"""

import os

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

# Never reach a real database unless a test asks for one explicitly
os.environ.setdefault("PHIAL_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PHIAL_LOG_FORMAT", "text")

from phial.config import get_settings  # noqa: E402
from phial.db.base import Base  # noqa: E402
import tests.models  # noqa: E402,F401


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session
