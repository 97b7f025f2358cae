"""
Shared fixtures: every test gets a fresh sqlite database and an httpx client
wired to the FastAPI app through ASGITransport.
"""
import os

# must be set before evensplit.core.config is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from evensplit.db.base import Base
from evensplit.db.session import get_db
from evensplit.main import app


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register(client, name, password="secret123"):
    """Register and log in ``name``. Returns the user json plus bearer headers."""
    email = f"{name.lower()}@example.com"
    resp = await client.post(
        "/api/v1/users/register",
        json={"email": email, "name": name, "password": password},
    )
    assert resp.status_code == 200, resp.text

    resp = await client.post("/api/v1/users/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text

    access = resp.cookies.get("access_token")
    refresh = resp.cookies.get("refresh_token")
    # cookies win over the Authorization header, keep the jar empty so several users can share a client
    client.cookies.clear()

    return {
        "user": resp.json(),
        "id": resp.json()["id"],
        "headers": {"Authorization": f"Bearer {access}"},
        "refresh_token": refresh,
    }


async def make_group(client, owner, name="Trip"):
    resp = await client.post("/api/v1/groups/", json={"name": name}, headers=owner["headers"])
    assert resp.status_code == 201, resp.text
    return resp.json()


async def add_member(client, admin, group_id, user):
    resp = await client.post(
        f"/api/v1/groups/{group_id}/members",
        json={"user_id": user["id"]},
        headers=admin["headers"],
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def make_expense(client, creator, amount="100.00", **fields):
    body = {"title": "Dinner", "amount": amount, "date": "2024-03-01"}
    body.update(fields)
    return await client.post("/api/v1/expenses/", json=body, headers=creator["headers"])
