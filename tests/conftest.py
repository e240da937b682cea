"""
Shared fixtures: a fresh in-memory database per test, the SQL stores over it,
and an ASGI client whose requests use that same database.
"""

import os

# Must be set before anything reads the cached settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["FF_USE_REDIS"] = "false"
os.environ["FF_USE_SESSION_AUTH"] = "true"
os.environ["FF_LLM_PROVIDER"] = "openai"
os.environ["OPENAI_API_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["ADMIN_PASSWORD"] = ""
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import untire.models  # noqa: F401  (registers tables)
from untire.coach.profile_updater import DynamicProfileUpdater
from untire.core import dependencies
from untire.core.auth import create_user
from untire.core.database import Base, session_scope
from untire.factory import create_app
from untire.stores.sql import sql_stores


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def stores(db_session):
    return sql_stores(db_session)


@pytest.fixture
def extracted():
    """What the fake extractor returns; tests overwrite ["text"]."""
    return {"text": "", "calls": []}


@pytest.fixture
def updater(session_factory, extracted):
    async def fake_extractor(history, current):
        extracted["calls"].append((history, current))
        return extracted["text"]

    return DynamicProfileUpdater(session_factory=session_factory, extractor=fake_extractor, maxsize=10)


@pytest.fixture
def app(session_factory, updater):
    app = create_app()

    async def override_get_db():
        async with session_scope(session_factory) as session:
            yield session

    app.dependency_overrides[dependencies.get_db] = override_get_db
    app.dependency_overrides[dependencies.get_updater] = lambda: updater
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def _make_user(session_factory, username, password, is_admin=False):
    async with session_scope(session_factory) as db:
        user = await create_user(db, username, password, is_admin=is_admin)
        return user.id


async def _login(client, username, password) -> dict:
    resp = await client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    # The cookie would win over the header; each fixture user goes by header only
    client.cookies.clear()
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
async def user_id(session_factory):
    return await _make_user(session_factory, "alice", "alice-password")


@pytest.fixture
async def auth_headers(client, user_id):
    return await _login(client, "alice", "alice-password")


@pytest.fixture
async def admin_headers(client, session_factory):
    await _make_user(session_factory, "root", "root-password", is_admin=True)
    return await _login(client, "root", "root-password")


@pytest.fixture
async def other_headers(client, session_factory):
    await _make_user(session_factory, "bob", "bob-password")
    return await _login(client, "bob", "bob-password")
