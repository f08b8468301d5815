"""
Pytest configuration and fixtures for Taskhive tests.

Tests run against an in-memory SQLite database (aiosqlite) with foreign keys
switched on, so cascades behave as they do on PostgreSQL.
"""

import os

os.environ.setdefault("TASKHIVE_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import uuid

import pytest
import pytest_asyncio
from fastapi import Request
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import SQLModel

import app.models  # noqa: F401
from app.auth import get_current_user
from app.context import AuthenticatedUser
from app.database import build_engine, get_session
from app.main import app
from app.services.accounts import create_account


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_USER_HEADER = "X-Test-User"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a fresh in-memory database per test."""
    engine = build_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_session(session_maker):
    """A session for service-level tests; everything is rolled back afterwards."""
    async with session_maker() as session:
        yield session
        await session.rollback()


async def make_user(session: AsyncSession, name: str, full_name: str | None = None) -> AuthenticatedUser:
    metadata = {"full_name": full_name} if full_name is not None else {}
    account = await create_account(
        session,
        provider_uid=f"{name}-{uuid.uuid4().hex[:8]}",
        email=f"{name}@example.com",
        user_metadata=metadata,
    )
    return AuthenticatedUser(id=account.id, uid=account.provider_uid, email=account.email)


@pytest_asyncio.fixture(scope="function")
async def owner(test_session):
    return await make_user(test_session, "owner", "Olivia Owner")


@pytest_asyncio.fixture(scope="function")
async def member(test_session):
    return await make_user(test_session, "member", "Max Member")


@pytest_asyncio.fixture(scope="function")
async def outsider(test_session):
    return await make_user(test_session, "outsider")


@pytest_asyncio.fixture(scope="function")
async def api_users(session_maker):
    """Committed accounts for API tests: owner, member, outsider."""
    async with session_maker() as session:
        users = {
            "owner": await make_user(session, "owner", "Olivia Owner"),
            "member": await make_user(session, "member", "Max Member"),
            "outsider": await make_user(session, "outsider"),
        }
        await session.commit()
    return users


def as_user(user: AuthenticatedUser) -> dict[str, str]:
    """Request headers that make the test client act as ``user``."""
    return {TEST_USER_HEADER: str(user.id)}


@pytest_asyncio.fixture(scope="function")
async def client(session_maker):
    """Create an async test client with test database and header-based callers."""

    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_current_user(request: Request) -> AuthenticatedUser:
        return AuthenticatedUser(id=uuid.UUID(request.headers[TEST_USER_HEADER]), uid="test")

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_current_user] = override_get_current_user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    """``headers(user)`` builds the request headers acting as ``user``."""
    return as_user
