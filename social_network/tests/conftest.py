import os

# Settings are read once at import time, so the environment goes first
os.environ["ENVIRONMENT"] = "testing"
os.environ["TESTING"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import itertools
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from social_network.config import settings
from social_network.db.session import get_db
from social_network.main import app
from social_network.models import Base, User, UserRole
from social_network.schemas.user_schema import UserCreate
from social_network.services import redis_service
from social_network.services.auth_service import AuthService

TEST_PASSWORD = "Password123!"


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis; shared store per test"""
    store: Dict[str, str] = {}

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "FakeRedis":
        return cls()

    async def get(self, key: str) -> Optional[str]:
        return self.store.get(key)

    async def set(self, name: str, value: str, ex: Optional[int] = None) -> None:
        self.store[name] = value

    async def setex(self, key: str, expire: int, value: str) -> None:
        self.store[key] = value

    async def delete(self, key: str) -> None:
        self.store.pop(key, None)

    async def aclose(self) -> None:
        pass


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch) -> Dict[str, str]:
    """Replace the Redis client used by RedisService"""
    FakeRedis.store = {}
    monkeypatch.setattr(redis_service, "Redis", FakeRedis)
    return FakeRedis.store


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
async def test_engine(database_url):
    """Create a fresh file-backed database for every test"""
    engine = create_async_engine(database_url, echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def create_user(test_db: AsyncSession):
    """Factory creating users through AuthService"""
    counter = itertools.count(1)

    async def _create_user(
        username: Optional[str] = None,
        role: str = UserRole.USER,
        **fields
    ) -> User:
        username = username or f"user{next(counter)}"
        user_data = UserCreate(
            username=username,
            email=f"{username}@example.com",
            password=TEST_PASSWORD,
            **fields
        )
        return await AuthService(test_db).create_user(user_data, role=role)

    return _create_user


@pytest.fixture
async def users(create_user) -> List[User]:
    """Three ordinary users: alice, bob and carol"""
    return [
        await create_user("alice", full_name="Alice"),
        await create_user("bob", full_name="Bob"),
        await create_user("carol", full_name="Carol"),
    ]


@pytest.fixture
async def admin(create_user) -> User:
    return await create_user("admin", role=UserRole.ADMIN)


@pytest.fixture
async def client_factory(session_factory, test_db):
    """Build API clients, optionally authenticated as a user via the auth cookie"""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    clients: List[AsyncClient] = []

    def _make_client(user: Optional[User] = None) -> AsyncClient:
        cookies = {}
        if user is not None:
            token, _ = AuthService(test_db).create_access_token(user)
            cookies[settings.AUTH_COOKIE_NAME] = token

        client = AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            cookies=cookies,
        )
        clients.append(client)
        return client

    yield _make_client

    for client in clients:
        await client.aclose()
    app.dependency_overrides.clear()


@pytest.fixture
def test_client(client_factory) -> AsyncClient:
    """Anonymous client"""
    return client_factory()
