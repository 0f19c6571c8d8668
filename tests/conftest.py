"""
Global test fixtures and configuration.

This module provides base fixtures for all tests:
- In-memory SQLite database, fresh for each test
- Redis client (in-memory fake)
- Recording notification sender
- HTTP client with dependency overrides
- Base data fixtures (user, organization, auth_headers)
"""

import os
import pytest
from typing import AsyncGenerator, List, Tuple
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from fakeredis import FakeAsyncRedis

# Set test environment variables BEFORE importing the app
os.environ["MODE"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["EMAIL_BACKEND"] = "console"
os.environ["APP_URL"] = "http://app.test"
os.environ["SENTRY_DSN"] = ""
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from teamspace.main import app
from teamspace.api.dependencies import get_db, get_notification_sender, get_redis
from teamspace.db.base import Base

TEST_DATABASE_URL = os.environ["DATABASE_URL"]


# ==================== Database ====================

@pytest.fixture(scope="function")
async def test_engine():
    """
    Create a test database engine with all tables.

    StaticPool keeps a single connection so the in-memory database is
    shared by every session of the test.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False  # Set to True for SQL debugging
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    DB session shared by the test and the app under test.

    The database is discarded with the engine after each test.
    """
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


# ==================== Redis ====================

@pytest.fixture(scope="function")
async def redis_client() -> AsyncGenerator[FakeAsyncRedis, None]:
    """Fake Redis client (in-memory) for each test."""
    redis = FakeAsyncRedis()
    yield redis
    await redis.flushall()
    await redis.aclose()


# ==================== Notifications ====================

class RecordingSender:
    """NotificationSender that stores messages instead of sending them."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: List[Tuple[str, str, str]] = []

    async def send(self, to: str, subject: str, body: str) -> bool:
        self.sent.append((to, subject, body))
        return self.succeed


@pytest.fixture
def notification_sender() -> RecordingSender:
    return RecordingSender()


# ==================== FastAPI Client ====================

@pytest.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    redis_client: FakeAsyncRedis,
    notification_sender: RecordingSender
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create HTTP client for testing FastAPI endpoints.

    Overrides get_db, get_redis and get_notification_sender to use test fixtures.
    """

    async def override_get_db():
        yield db_session

    async def override_get_redis():
        yield redis_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_notification_sender] = lambda: notification_sender

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Base Data Fixtures ====================

def make_auth_headers(user) -> dict:
    from teamspace.core.security import create_session_token

    return {"Authorization": f"Bearer {create_session_token(user)}"}


@pytest.fixture
def auth_headers_for():
    """Build authorization headers for any user."""
    return make_auth_headers


@pytest.fixture
async def user(db_session: AsyncSession):
    """Create a test user (password "Password123!")."""
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session, email="owner@acme.com", display_name="Alice")
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def auth_headers(user):
    """Authorization header with a valid session token for `user`."""
    return make_auth_headers(user)


@pytest.fixture
async def organization(db_session: AsyncSession, user):
    """Organization "Acme" owned by `user`, who is also an ADMIN member."""
    from tests.factories.organization import OrganizationFactory
    org = await OrganizationFactory.create_with_owner_async(db_session, owner=user, name="Acme", slug="acme")
    await db_session.commit()
    await db_session.refresh(org)
    return org


@pytest.fixture
async def member_user(db_session: AsyncSession, organization):
    """A plain MEMBER of `organization`."""
    from tests.factories.user import UserFactory
    from tests.factories.membership import MembershipFactory
    member = await UserFactory.create_async(db_session, email="carol@acme.com", display_name="Carol")
    await MembershipFactory.create_async(
        db_session, user_id=member.id, organization_id=organization.id, role="MEMBER"
    )
    await db_session.commit()
    await db_session.refresh(member)
    return member


@pytest.fixture
async def member_auth_headers(member_user):
    return make_auth_headers(member_user)


@pytest.fixture
async def outsider(db_session: AsyncSession):
    """A user with no membership in `organization`."""
    from tests.factories.user import UserFactory
    outsider = await UserFactory.create_async(db_session, email="mallory@elsewhere.com")
    await db_session.commit()
    await db_session.refresh(outsider)
    return outsider


@pytest.fixture
async def outsider_auth_headers(outsider):
    return make_auth_headers(outsider)
