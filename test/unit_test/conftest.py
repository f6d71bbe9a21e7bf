from datetime import timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlmodel.pool import StaticPool

from character_figure.core.database import create_all, create_sessionmaker
from character_figure.core.database.entities.users import User
from character_figure.core.database.repositories import UserRepository
from character_figure.core.utils import get_uuid, utc_now

# Use in-memory SQLite for testing
# Note: We use check_same_thread=False for SQLite with async
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    async_session_maker = create_sessionmaker(test_engine)

    async with async_session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def user(session: AsyncSession) -> User:
    """A signed-up user without any credits."""
    return await UserRepository(session).create(
        User(uuid=get_uuid(), email="alice@example.com", nickname="alice", avatar_url="https://mock.cdn/alice.png")
    )


@pytest_asyncio.fixture
async def other_user(session: AsyncSession) -> User:
    return await UserRepository(session).create(User(uuid=get_uuid(), email="bob@example.com", nickname="bob"))


@pytest.fixture
def sample_order_data() -> dict:
    """A created one-time order for the trial pack, without an owner."""
    return {
        "order_no": "1001",
        "user_email": "alice@example.com",
        "amount": 399,
        "interval": "one-time",
        "currency": "usd",
        "product_id": "trial-pack",
        "product_name": "Trial Pack",
        "credits": 150,
        "valid_months": 1,
        "expired_at": utc_now() + timedelta(days=30),
        "status": "created",
    }
