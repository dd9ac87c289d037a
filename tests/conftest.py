"""
Test infrastructure for the Social Platform API.

Strategy
--------
- SQLite in-memory via aiosqlite, so no Postgres is needed in CI.
- StaticPool makes every task share the one in-memory connection; a new
  connection would see an empty database.
- ``get_db`` is overridden so requests use the test session factory.
- Tables are created before and dropped after every test.
- Redis is disabled (``cache._redis = None``); the CacheManager turns all
  operations into no-ops, so the real database path is exercised.  Tests
  that need a working cache request ``live_cache``, a dict-backed store.
- bcrypt runs with the minimum cost factor to keep registration fast.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import uuid  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.cache import cache  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.middleware import install_query_counter  # noqa: E402
from app.models import User  # noqa: E402

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
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    cache._redis = None
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


class FakeRedis:
    """Dict-backed stand-in for ``redis.asyncio.Redis``; TTLs are ignored."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value

    async def delete(self, *keys):
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    async def ping(self):
        return True

    async def aclose(self):
        pass


@pytest_asyncio.fixture
async def live_cache():
    """Switch the shared CacheManager onto an in-memory store for one test."""
    fake = FakeRedis()
    cache._redis = fake
    yield fake
    cache._redis = None


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live session for tests that call services directly."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def register_user(async_client: AsyncClient):
    """
    Factory fixture: ``await register_user("alice")`` registers an account
    through the API and returns ``(user_id, auth_headers)``.
    """

    async def _register(name: str) -> tuple[str, dict]:
        resp = await async_client.post("/api/v1/users/register", json={
            "email": f"{name}@example.com",
            "password": "secret123",
            "first_name": name.capitalize()[:15],
            "last_name": "Tester",
        })
        assert resp.status_code == 200, resp.text
        body = resp.json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['access_token']}"}

    return _register


@pytest_asyncio.fixture
async def make_db_user(db_session: AsyncSession):
    """Factory fixture that inserts a User row directly (no password hashing)."""

    async def _make(name: str) -> User:
        user = User(
            id=uuid.uuid4(),
            email=f"{name}@example.com",
            first_name=name.capitalize()[:15],
            last_name="Service",
            hashed_password="not-a-real-hash",
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _make
