"""
Shared test fixtures for the Kitchensink test suite.

Async throughout (aiosqlite + AsyncSession + httpx.AsyncClient).
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-signing-key-0123456789abcdef0123456789"
# Cheap hashes keep the suite fast
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CORS_ORIGINS"] = "[]"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from kitchensink.api.deps import get_db
from kitchensink.core.config import settings
from kitchensink.core.security import AccessTokenCodec, PasswordHasher
from kitchensink.db.base import Base
from kitchensink.db.session import enable_sqlite_foreign_keys
from kitchensink.main import app
from kitchensink.repositories.refresh_tokens import RefreshTokenRepository
from kitchensink.repositories.users import UserRepository
from kitchensink.services.refresh_tokens import RefreshTokenService
from kitchensink.services.users import UserService

TEST_SECRET = os.environ["JWT_SECRET"]
DEFAULT_PASSWORD = "Password123"

# Create a test engine for the entire session
test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(test_engine.sync_engine)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before usage and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def codec() -> AccessTokenCodec:
    return AccessTokenCodec(TEST_SECRET, settings.access_token_lifetime)


# ── Helpers ─────────────────────────────────────────────────────────
async def register(
    client: AsyncClient,
    username: str = "alice2024",
    email: str = "alice@example.com",
    password: str = DEFAULT_PASSWORD,
):
    return await client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password},
    )


async def login(client: AsyncClient, username: str = "alice2024", password: str = DEFAULT_PASSWORD):
    return await client.post("/api/auth/login", json={"username": username, "password": password})


def bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


async def create_admin(
    session: AsyncSession,
    username: str = "rootadmin",
    email: str = "root@example.com",
    password: str = DEFAULT_PASSWORD,
):
    users = UserRepository(session)
    refresh_tokens = RefreshTokenService(users, RefreshTokenRepository(session), settings.refresh_token_lifetime)
    return await UserService(users, refresh_tokens, PasswordHasher(rounds=4)).create_admin_user(
        username, email, password
    )


@pytest.fixture
async def user_tokens(async_client: AsyncClient) -> dict:
    """Register and log in a regular user; returns the login body."""
    await register(async_client)
    resp = await login(async_client)
    assert resp.status_code == 200
    return resp.json()


@pytest.fixture
async def admin_tokens(async_client: AsyncClient, db_session: AsyncSession) -> dict:
    """Seed an admin directly in the store and log in over HTTP."""
    await create_admin(db_session)
    resp = await login(async_client, "rootadmin")
    assert resp.status_code == 200
    return resp.json()
