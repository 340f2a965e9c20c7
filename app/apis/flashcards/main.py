from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.base import get_session
from app.core.db_services import FlashcardService
from .schemas import (
    FlashcardCreate,
    FlashcardListResponse,
    FlashcardPatch,
    FlashcardRead,
    FlashcardResponse,
)
from app.apis.schemas import MessageResponse, OptionalQueryId, PathId, QueryId


router = APIRouter(prefix="/flashcards", tags=["flashcards"])


@router.get("", response_model=FlashcardListResponse)
async def list_flashcards(
    record_id: OptionalQueryId = None,
    query: Optional[str] = Query(
        None, description="Case-insensitive search over question, answer and hint"
    ),
    session: AsyncSession = Depends(get_session),
) -> FlashcardListResponse:
    cards = await FlashcardService(session).list_flashcards(
        record_id=record_id, query=query
    )
    return FlashcardListResponse(
        flashcards=[FlashcardRead.model_validate(c) for c in cards]
    )


@router.post(
    "",
    response_model=FlashcardResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_flashcard(
    req: FlashcardCreate,
    session: AsyncSession = Depends(get_session),
) -> FlashcardResponse:
    """Append a flashcard; it gets the next sequence number of its record."""
    card = await FlashcardService(session).create_flashcard(
        record_id=req.record_id,
        question=req.question,
        answer=req.answer,
        hint=req.hint,
    )
    return FlashcardResponse(
        message="Flashcard created successfully",
        data=FlashcardRead.model_validate(card),
    )


@router.patch("/{sequence_number}", response_model=FlashcardResponse)
async def patch_flashcard(
    sequence_number: PathId,
    req: FlashcardPatch,
    session: AsyncSession = Depends(get_session),
) -> FlashcardResponse:
    card = await FlashcardService(session).update_flashcard(
        req.record_id, sequence_number, req.changes()
    )
    return FlashcardResponse(
        message="Flashcard updated", data=FlashcardRead.model_validate(card)
    )


@router.delete("/{sequence_number}", response_model=MessageResponse)
async def delete_flashcard(
    sequence_number: PathId,
    record_id: QueryId,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await FlashcardService(session).delete_flashcard(record_id, sequence_number)
    return MessageResponse(message="Flashcard deleted")
