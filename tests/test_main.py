"""Tests for app wiring, configuration and the error envelope."""

from fastapi import status
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from app.apis.schemas import MAX_ROW_ID
from app.core import errors
from app.core.config import DatabaseSettings, settings
from app.core.errors import CompositeWriteError, store_error_message


async def test_root(client: AsyncClient) -> None:
    response = await client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "status": "ok",
        "app": settings.app.name,
        "version": settings.app.version,
    }


async def test_unknown_route_uses_error_envelope(client: AsyncClient) -> None:
    response = await client.get("/nope")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Not Found"}


async def test_malformed_json_is_bad_request(client: AsyncClient) -> None:
    response = await client.post(
        "/records", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "error" in response.json()


def test_database_url_overrides_postgres_fields() -> None:
    config = DatabaseSettings(DATABASE_URL="sqlite+aiosqlite:///./cards.db")

    assert config.connection_string == "sqlite+aiosqlite:///./cards.db"
    assert config.is_sqlite is True


def test_postgres_connection_string(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    config = DatabaseSettings(
        POSTGRES_HOST="db", POSTGRES_DB_NAME="cards", POSTGRES_DB_USER="u"
    )

    assert config.connection_string == "postgresql+asyncpg://u:postgres@db:5432/cards"
    assert config.is_sqlite is False


def test_store_error_message_can_be_hidden(monkeypatch) -> None:
    exc = OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    assert store_error_message(exc) == "disk I/O error"
    monkeypatch.setattr(errors.settings.app, "expose_store_errors", False)
    assert store_error_message(exc) == "Internal server error"


def test_composite_error_payload_names_stage() -> None:
    error = CompositeWriteError("cover", "duplicate key")

    assert error.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert error.to_payload() == {
        "error": "Failed to write cover: duplicate key",
        "stage": "cover",
    }


async def test_request_id_is_echoed(client: AsyncClient) -> None:
    generated = await client.get("/")
    given = await client.get("/", headers={"X-Request-ID": "abc123"})

    assert generated.headers["X-Request-ID"]
    assert given.headers["X-Request-ID"] == "abc123"


class TestIdBounds:
    """Ids outside the INTEGER column range are rejected before any query."""

    HUGE = 1180591620717411303424

    async def test_path_id_too_large(self, client: AsyncClient) -> None:
        response = await client.get(f"/review/{self.HUGE}")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"].startswith("record_id:")

    async def test_path_id_not_positive(self, client: AsyncClient) -> None:
        response = await client.get("/records/0")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "user_id" in response.json()["error"]

    async def test_query_id_too_large(self, client: AsyncClient) -> None:
        response = await client.delete(
            "/bookmarks", params={"user_id": self.HUGE, "cover_id": 1}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "user_id" in response.json()["error"]

    async def test_body_id_too_large(self, client: AsyncClient) -> None:
        response = await client.post(
            "/flashcards", json={"record_id": self.HUGE, "question": "Q", "answer": "A"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "record_id" in response.json()["error"]

    async def test_largest_id_reaches_the_store(self, client: AsyncClient) -> None:
        response = await client.get(f"/review/{MAX_ROW_ID}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
