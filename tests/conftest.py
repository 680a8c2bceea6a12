"""Pytest configuration and fixtures."""

from typing import AsyncGenerator, List, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from uptime_monitor.config import Config, MonitoringConfig
from uptime_monitor.database.base import Base
from uptime_monitor.database.session import get_db
from uptime_monitor.models.log import Log
from uptime_monitor.models.website import Website

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def db_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    """Create session maker for tests."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@pytest.fixture
def test_app(session_maker):
    """Create test FastAPI app with overridden dependencies."""
    from uptime_monitor.main import app
    from uptime_monitor.core.rate_limiter import limiter

    async def get_test_db():
        async with session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = get_test_db
    limiter.enabled = False

    yield app

    limiter.enabled = True
    app.dependency_overrides.clear()
    if hasattr(app.state, "prober"):
        del app.state.prober


@pytest.fixture
def test_config() -> Config:
    """Create test configuration."""
    return Config(monitoring=MonitoringConfig(probe_interval=60))


@pytest.fixture
async def sample_site(db_session: AsyncSession) -> Website:
    """Create sample site for testing."""
    website = Website(url="https://example.com/health", alias="ex")

    db_session.add(website)
    await db_session.commit()
    await db_session.refresh(website)

    return website


@pytest.fixture
def add_logs(db_session: AsyncSession):
    """Insert log rows for a site with explicit timestamps."""

    async def _add_logs(
        website: Website,
        entries: List[tuple],
    ) -> List[Log]:
        logs = [
            Log(website_id=website.id, status=status, created_at=created_at)
            for status, created_at in entries
        ]
        db_session.add_all(logs)
        await db_session.commit()
        return logs

    return _add_logs


class MockResponse:
    """Async context manager standing in for an aiohttp response."""

    def __init__(self, status: int = 200, body: bytes = b"ok"):
        self.status = status
        self.body = body
        self.read_called = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    async def read(self) -> bytes:
        self.read_called = True
        return self.body


class MockSession:
    """
    Stand-in for ``aiohttp.ClientSession``.

    ``responses`` maps a URL to a status code or to an exception instance that
    ``get`` raises when entered.
    """

    def __init__(self, responses: Optional[dict] = None):
        self.responses = responses or {}
        self.requests = []
        self.closed = False

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        outcome = self.responses.get(url, 200)
        if isinstance(outcome, BaseException):
            return _FailingRequest(outcome)
        return MockResponse(status=outcome)

    async def close(self):
        self.closed = True


class _FailingRequest:
    def __init__(self, error: BaseException):
        self.error = error

    async def __aenter__(self):
        raise self.error

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


@pytest.fixture
def mock_http():
    """Factory for fake HTTP sessions."""
    return MockSession
