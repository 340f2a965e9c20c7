"""Pytest configuration and fixtures."""

import os

# Settings are read at import time, so the test database must be set first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["MAIL_ENABLED"] = "false"

from collections.abc import AsyncIterator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

import app.core.db.schemas  # noqa: F401
from app.core.db.base import Base, get_session
from app.core.db.schemas import User
from main import app as application


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory database per test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def sent_mail(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, str]]:
    """Captures verification mails instead of queueing them."""
    outbox: list[dict[str, str]] = []

    def capture(*, email: str, name: str, link: str) -> None:
        outbox.append({"email": email, "name": name, "link": link})

    monkeypatch.setattr("app.modules.auth.users.enqueue_verification_email", capture)
    return outbox


@pytest.fixture
async def client(
    session_maker: async_sessionmaker[AsyncSession],
    sent_mail: list[dict[str, str]],
) -> AsyncIterator[AsyncClient]:
    async def override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    application.dependency_overrides.clear()


@pytest.fixture
def register(client: AsyncClient):
    """Returns a coroutine function that registers an unverified user."""

    async def _register(
        email: str = "ada@example.com",
        password: str = "s3cret-pass",
        name: str = "Ada",
    ) -> None:
        response = await client.post(
            "/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text

    return _register


@pytest.fixture
async def user(
    client: AsyncClient,
    session_maker: async_sessionmaker[AsyncSession],
    register,
) -> dict[str, Any]:
    """A registered and verified user."""
    await register()
    async with session_maker() as session:
        db_user = (
            await session.execute(select(User).where(User.email == "ada@example.com"))
        ).scalar_one()
        token = db_user.verification_token
    response = await client.get("/auth/verify-email", params={"token": token})
    assert response.status_code == 200, response.text
    return {"id": db_user.id, "email": "ada@example.com", "password": "s3cret-pass"}


@pytest.fixture
async def full_record(client: AsyncClient, user: dict[str, Any]) -> dict[str, Any]:
    """A public record with a cover and two flashcards."""
    response = await client.post(
        f"/records/full/{user['id']}",
        json={
            "status": "Public",
            "category": "Math",
            "title": "Basic Addition",
            "description": "Simple sums",
            "questions": [
                {"question": "What is 1 + 1?", "answer": "2", "hint": "even"},
                {"question": "What is 2 + 3?", "answer": "5"},
            ],
        },
    )
    assert response.status_code == 201, response.text
    return response.json()
