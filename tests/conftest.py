"""Shared fixtures: in-memory SQLite app, HTTP client and account helpers."""

import os

# Must be set before app.core.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
from httpx import ASGITransport, AsyncClient

import app.models  # noqa: F401 - registers tables on Base.metadata
from app.core.rate_limit import rate_limiter
from app.db.base import Base
from app.db.session import async_session_maker, engine
from app.main import app

API = "/api/v1"
PASSWORD = "Str0ngPass!"


@pytest.fixture(autouse=True)
def reset_rate_limits():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
async def database():
    """Fresh schema per test; disposing the engine drops the in-memory database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest.fixture
async def db_session(database):
    async with async_session_maker() as session:
        yield session


@pytest.fixture
async def client(database):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register(client):
    """Sign up and log in; returns ``(headers, login_data)``."""

    async def _register(email: str = "lifter@example.com", password: str = PASSWORD, full_name: str = "Test Lifter"):
        resp = await client.post(
            f"{API}/auth/signup",
            json={"email": email, "password": password, "full_name": full_name},
        )
        assert resp.status_code == 201, resp.text
        resp = await client.post(f"{API}/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        data = resp.json()["data"]
        return {"Authorization": f"Bearer {data['access_token']}"}, data

    return _register


@pytest.fixture
async def auth_headers(register):
    headers, _ = await register()
    return headers
