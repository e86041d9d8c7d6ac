import itertools
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from storefront.config import settings
from storefront.core.security import create_access_token
from storefront.database import Base, get_db
from storefront.main import app
from storefront.models import User, UserRole, system_user_row
from storefront.services.wallet_service import WalletService

DISCORD_KEY = "discord-bot-test-key-0123456789abcdef"


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    # file-backed so every session gets its own connection
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)
    async with SessionLocal() as session:
        session.add(User(**system_user_row()))
        await session.commit()
    yield SessionLocal
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def service(db):
    return WalletService(db)


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    async def _make(role=UserRole.user, **kwargs):
        n = next(counter)
        user = User(
            fullname=kwargs.pop("fullname", f"User {n}"),
            username=kwargs.pop("username", f"user{n}"),
            email=kwargs.pop("email", f"user{n}@example.com"),
            role=role,
            **kwargs,
        )
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def wallet(service, make_user):
    user = await make_user()
    return await service.create_wallet(user.id)


@pytest_asyncio.fixture
async def admin_user(make_user):
    return await make_user(role=UserRole.admin, username="admin", email="admin@example.com")


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {create_access_token(admin_user.id)}"}


@pytest.fixture
def discord_headers(monkeypatch):
    monkeypatch.setattr(settings, "DISCORD_BOT_API_KEY", DISCORD_KEY)
    return {"X-API-Key": DISCORD_KEY}


@pytest.fixture(autouse=True)
def mock_redis(monkeypatch):
    """Keep the rate limiter off a real Redis."""
    redis = AsyncMock()
    redis.incr = AsyncMock(return_value=1)
    redis.expire = AsyncMock(return_value=True)
    monkeypatch.setattr("storefront.core.deps.get_redis", AsyncMock(return_value=redis))
    return redis


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session
    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
