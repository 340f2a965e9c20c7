"""Tests for GET /review/{record_id}."""

from fastapi import status
from httpx import AsyncClient


async def test_review_returns_cards_in_study_order(
    client: AsyncClient, full_record
) -> None:
    record_id = full_record["record"]["id"]
    await client.post(
        "/flashcards", json={"record_id": record_id, "question": "Q3", "answer": "A3"}
    )

    response = await client.get(f"/review/{record_id}")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["record_id"] == record_id
    assert data["count"] == 3
    assert [c["sequence_number"] for c in data["flashcards"]] == [1, 2, 3]
    assert set(data["flashcards"][0]) == {
        "id",
        "sequence_number",
        "question",
        "answer",
        "hint",
    }


async def test_review_record_without_cards(client: AsyncClient, user) -> None:
    record = await client.post(
        "/records", json={"user_id": user["id"], "category": "Art", "status": "Private"}
    )
    record_id = record.json()["data"]["id"]

    response = await client.get(f"/review/{record_id}")

    assert response.json() == {"record_id": record_id, "count": 0, "flashcards": []}


async def test_review_unknown_record(client: AsyncClient) -> None:
    response = await client.get("/review/999")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Record 999 not found"}
