from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.apis.schemas import PathId
from app.core.db.base import get_session
from app.core.db_services import FlashcardService
from .schemas import ReviewCard, ReviewResponse


router = APIRouter(prefix="/review", tags=["review"])


@router.get("/{record_id}", response_model=ReviewResponse)
async def review_record(
    record_id: PathId,
    session: AsyncSession = Depends(get_session),
) -> ReviewResponse:
    """Flashcards of a record in study order."""
    cards = await FlashcardService(session).review(record_id)
    return ReviewResponse(
        record_id=record_id,
        count=len(cards),
        flashcards=[ReviewCard.model_validate(c) for c in cards],
    )
