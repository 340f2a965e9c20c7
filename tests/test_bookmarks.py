"""Tests for bookmarks API endpoints."""

import asyncio

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.db.base import Base
from app.core.db.schemas import Bookmark


async def bookmark_count(session_maker) -> int:
    async with session_maker() as session:
        return (
            await session.execute(select(func.count()).select_from(Bookmark))
        ).scalar_one()


class TestCreateBookmark:
    """Test suite for POST /bookmarks."""

    async def test_bookmark_cover(self, client: AsyncClient, user, full_record) -> None:
        response = await client.post(
            "/bookmarks",
            json={"user_id": user["id"], "cover_id": full_record["cover"]["id"]},
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["message"] == "Cover bookmarked"
        assert data["data"]["cover_id"] == full_record["cover"]["id"]
        assert data["data"]["flashcard_id"] is None

    async def test_bookmark_flashcard(self, client: AsyncClient, user, full_record) -> None:
        flashcard_id = full_record["flashcards"][1]["id"]

        response = await client.post(
            "/bookmarks", json={"user_id": user["id"], "flashcard_id": flashcard_id}
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["message"] == "Flashcard bookmarked"
        assert response.json()["data"]["flashcard_id"] == flashcard_id

    async def test_duplicate_returns_existing(
        self, client: AsyncClient, user, full_record, session_maker
    ) -> None:
        payload = {"user_id": user["id"], "cover_id": full_record["cover"]["id"]}
        first = await client.post("/bookmarks", json=payload)

        second = await client.post("/bookmarks", json=payload)

        assert second.status_code == status.HTTP_200_OK
        assert second.json()["data"]["id"] == first.json()["data"]["id"]
        assert await bookmark_count(session_maker) == 1

    async def test_requires_exactly_one_target(
        self, client: AsyncClient, user, full_record, session_maker
    ) -> None:
        both = await client.post(
            "/bookmarks",
            json={
                "user_id": user["id"],
                "cover_id": full_record["cover"]["id"],
                "flashcard_id": full_record["flashcards"][0]["id"],
            },
        )
        neither = await client.post("/bookmarks", json={"user_id": user["id"]})

        assert both.status_code == status.HTTP_400_BAD_REQUEST
        assert neither.status_code == status.HTTP_400_BAD_REQUEST
        assert "exactly one" in neither.json()["error"]
        assert await bookmark_count(session_maker) == 0

    async def test_unknown_target(self, client: AsyncClient, user) -> None:
        response = await client.post(
            "/bookmarks", json={"user_id": user["id"], "flashcard_id": 999}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Flashcard 999 not found"}


class TestConcurrentBookmark:
    """Identical bookmark requests racing on separate connections."""

    @pytest.fixture
    async def engine(self, tmp_path):
        file_engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'cards.db'}",
            connect_args={"timeout": 15},
        )
        async with file_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        yield file_engine
        await file_engine.dispose()

    async def test_concurrent_duplicates_share_one_row(
        self, client: AsyncClient, user, full_record, session_maker
    ) -> None:
        payload = {"user_id": user["id"], "cover_id": full_record["cover"]["id"]}

        first, second = await asyncio.gather(
            client.post("/bookmarks", json=payload),
            client.post("/bookmarks", json=payload),
        )

        assert sorted([first.status_code, second.status_code]) == [
            status.HTTP_200_OK,
            status.HTTP_201_CREATED,
        ]
        assert first.json()["data"]["id"] == second.json()["data"]["id"]
        assert await bookmark_count(session_maker) == 1

class TestListBookmarks:
    """Test suite for GET /bookmarks/{user_id}."""

    async def test_list_includes_targets(self, client: AsyncClient, user, full_record) -> None:
        await client.post(
            "/bookmarks",
            json={"user_id": user["id"], "cover_id": full_record["cover"]["id"]},
        )
        await client.post(
            "/bookmarks",
            json={"user_id": user["id"], "flashcard_id": full_record["flashcards"][0]["id"]},
        )

        response = await client.get(f"/bookmarks/{user['id']}")

        assert response.status_code == status.HTTP_200_OK
        cover_mark, card_mark = response.json()["bookmarks"]
        assert cover_mark["cover"]["title"] == "Basic Addition"
        assert cover_mark["flashcard"] is None
        assert card_mark["cover"] is None
        assert card_mark["flashcard"]["question"] == "What is 1 + 1?"
        assert card_mark["flashcard"]["sequence_number"] == 1

    async def test_list_empty(self, client: AsyncClient, user) -> None:
        response = await client.get(f"/bookmarks/{user['id']}")

        assert response.json() == {"bookmarks": []}


class TestDeleteBookmark:
    """Test suite for DELETE /bookmarks."""

    async def test_delete_bookmark(
        self, client: AsyncClient, user, full_record, session_maker
    ) -> None:
        cover_id = full_record["cover"]["id"]
        await client.post("/bookmarks", json={"user_id": user["id"], "cover_id": cover_id})

        response = await client.delete(
            "/bookmarks", params={"user_id": user["id"], "cover_id": cover_id}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Bookmark removed"}
        assert await bookmark_count(session_maker) == 0

    async def test_delete_missing_bookmark_leaves_table_unchanged(
        self, client: AsyncClient, user, full_record, session_maker
    ) -> None:
        await client.post(
            "/bookmarks",
            json={"user_id": user["id"], "cover_id": full_record["cover"]["id"]},
        )

        response = await client.delete(
            "/bookmarks",
            params={"user_id": user["id"], "flashcard_id": full_record["flashcards"][0]["id"]},
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Bookmark not found"}
        assert await bookmark_count(session_maker) == 1

    async def test_delete_requires_one_target(self, client: AsyncClient, user) -> None:
        response = await client.delete("/bookmarks", params={"user_id": user["id"]})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
