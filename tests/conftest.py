"""Pytest configuration and fixtures."""

import os

# Keep the module-level engine away from a real PostgreSQL instance.
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from ecopoints.infrastructure.database import (
    RetryPolicy,
    create_async_db_engine,
    create_session_factory,
)
from ecopoints.models import Base, RewardListing, UserAccount
from ecopoints.services.notifications import ChangeNotifier


@pytest.fixture(scope="session")
def app():
    """Create FastAPI application for testing."""
    from ecopoints.main import create_app

    return create_app()


@pytest.fixture(scope="session")
def client(app):
    """Create test client."""
    with TestClient(app) as client:
        yield client


@pytest.fixture(scope="function")
def settings():
    """Create settings instance for testing."""
    from ecopoints.core.config import Settings

    return Settings(environment="testing", db_url="sqlite+aiosqlite:///:memory:")


@pytest.fixture
def retry_policy():
    """Fast retry policy so conflict tests do not sleep."""
    return RetryPolicy(max_attempts=10, backoff_ms=1, backoff_max_ms=5, jitter=True)


@pytest.fixture
def notifier():
    """Fresh change notifier per test."""
    return ChangeNotifier()


@pytest.fixture
def database_url(tmp_path):
    """File-backed SQLite database (shared by every connection of a test)."""
    return f"sqlite+aiosqlite:///{tmp_path / 'ecopoints.db'}"


@pytest_asyncio.fixture
async def engine(database_url):
    """Async engine with the schema created."""
    engine = create_async_db_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session factory bound to the test engine."""
    return create_session_factory(engine)


@pytest.fixture
def seed(session_factory):
    """Insert accounts and rewards directly."""

    class Seeder:
        async def account(self, user_id: str, balance: int = 0) -> UserAccount:
            async with session_factory() as session:
                account = UserAccount(id=user_id, point_balance=balance)
                session.add(account)
                await session.commit()
                return account

        async def reward(
            self,
            cost: int,
            stock: int,
            name: str = "Reusable bottle",
            category: str | None = "household",
        ) -> RewardListing:
            async with session_factory() as session:
                reward = RewardListing(cost=cost, stock=stock, name=name, category=category)
                session.add(reward)
                await session.commit()
                return reward

    return Seeder()


@pytest.fixture
def fetch(session_factory):
    """Read rows back in a fresh session."""

    class Fetcher:
        async def account(self, user_id: str) -> UserAccount | None:
            async with session_factory() as session:
                return await session.get(UserAccount, user_id)

        async def reward(self, reward_id: int) -> RewardListing | None:
            async with session_factory() as session:
                return await session.get(RewardListing, reward_id)

    return Fetcher()
