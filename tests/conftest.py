"""
Pytest Configuration and Shared Fixtures

Every test gets a fresh in-memory SQLite database (aiosqlite) with the
full schema, and repositories bound to one session on it.
"""
import os
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
os.environ["APP_ENV"] = "testing"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite+aiosqlite://"

from dataaccess.db.models import User  # noqa: E402
from dataaccess.db.session import (  # noqa: E402
    create_engine_from_settings,
    init_models,
    make_session_factory,
)
from dataaccess.repositories import OrderRepository, UserRepository  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ==================== Database Fixtures ====================

@pytest_asyncio.fixture
async def engine():
    """Provide an engine on a private in-memory database with the schema created"""
    engine = create_engine_from_settings(url=TEST_DATABASE_URL, poolclass=StaticPool)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Provide a session factory bound to the test engine"""
    return make_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    """Provide one unit of work for the test"""
    async with session_factory() as session:
        yield session
        await session.rollback()


# ==================== Repository Fixtures ====================

@pytest.fixture
def user_repo(session):
    return UserRepository(session)


@pytest.fixture
def order_repo(session):
    return OrderRepository(session)


@pytest.fixture
def make_user(user_repo):
    """Factory that stores a user with a unique email"""

    async def _make_user(first_name: str = "Test", last_name: str = "User", email: str | None = None) -> User:
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email or f"test.user.{uuid4().hex[:8]}@example.com",
        )
        return await user_repo.add(user)

    return _make_user
