"""
Test infrastructure for the Newsdesk API.

Strategy
--------
- Required settings are provided through environment variables before the
  ``newsdesk`` package is imported; bcrypt runs at its minimum cost.
- SQLite in-memory via aiosqlite removes the need for a running Postgres
  instance.  StaticPool makes every session share the one connection, since
  an in-memory database is connection-scoped.
- The app's get_db dependency is overridden so every test-time request uses
  the test session factory rather than the production one.
- All tables are created fresh before each test and dropped after.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from newsdesk.database import Base, get_db
from newsdesk.main import app
from newsdesk.middleware import install_query_counter
from newsdesk.security import create_access_token
from newsdesk.services import auth_service

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override: replace production get_db with the test session factory
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _create_committed_user(username: str, password: str, is_admin: bool) -> dict:
    async with async_session_test() as session:
        user = await auth_service.create_user(session, username, password, is_admin=is_admin)
        await session.commit()
    return user


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live session for seeding data and calling services directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def admin_user() -> dict:
    user = await _create_committed_user("admin", "admin-password", is_admin=True)
    user["token"] = create_access_token(user["id"], user["username"], True)
    return user


@pytest_asyncio.fixture
async def regular_user() -> dict:
    user = await _create_committed_user("reader", "reader-password", is_admin=False)
    user["token"] = create_access_token(user["id"], user["username"], False)
    return user


class FailingCommitSession(AsyncSession):
    """A session whose commit fails the way a dropped connection does."""

    async def commit(self) -> None:
        raise OperationalError("COMMIT", {}, Exception("connection lost during commit"))


@pytest.fixture
def failing_commit():
    """Route every request through a session whose commit raises."""
    sessions = async_sessionmaker(
        engine_test, class_=FailingCommitSession, expire_on_commit=False
    )

    async def _get_db():
        async with sessions() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides[get_db] = override_get_db
