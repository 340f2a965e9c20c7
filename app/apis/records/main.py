from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.apis.cover.schemas import CoverRead
from app.apis.flashcards.schemas import FlashcardRead
from app.apis.schemas import MessageResponse, PathId
from app.core.db.base import get_session
from app.core.db_services import RecordService
from .schemas import (
    RecordCreate,
    RecordFullCreate,
    RecordFullPatch,
    RecordFullResponse,
    RecordFullUpdateResponse,
    RecordListResponse,
    RecordRead,
    RecordResponse,
)


router = APIRouter(prefix="/records", tags=["records"])


@router.post("", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
async def create_record(
    req: RecordCreate,
    session: AsyncSession = Depends(get_session),
) -> RecordResponse:
    record = await RecordService(session).create_record(
        user_id=req.user_id, category=req.category, status=req.status
    )
    return RecordResponse(
        message="Record created successfully", data=RecordRead.model_validate(record)
    )


@router.get("/{user_id}", response_model=RecordListResponse)
async def list_records(
    user_id: PathId,
    session: AsyncSession = Depends(get_session),
) -> RecordListResponse:
    records = await RecordService(session).list_records(user_id)
    return RecordListResponse(records=[RecordRead.model_validate(r) for r in records])


@router.post(
    "/full/{user_id}",
    response_model=RecordFullResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_full_record(
    user_id: PathId,
    req: RecordFullCreate,
    session: AsyncSession = Depends(get_session),
) -> RecordFullResponse:
    """Create a record with its cover and flashcards, all or nothing."""
    full = await RecordService(session).create_full(
        user_id=user_id,
        status=req.status,
        category=req.category,
        title=req.title,
        description=req.description,
        questions=[q.model_dump() for q in req.questions],
    )
    return RecordFullResponse(
        message="Record, Cover, and Flashcards created successfully",
        record=RecordRead.model_validate(full.record),
        cover=CoverRead.model_validate(full.cover),
        flashcards=[FlashcardRead.model_validate(c) for c in full.flashcards],
    )


@router.patch("/full/{record_id}", response_model=RecordFullUpdateResponse)
async def update_full_record(
    record_id: PathId,
    req: RecordFullPatch,
    session: AsyncSession = Depends(get_session),
) -> RecordFullUpdateResponse:
    """Patch the record, its cover and numbered flashcards; omitted fields are kept."""
    updated = await RecordService(session).update_full(
        record_id,
        record_updates=req.record_updates(),
        cover_updates=req.cover_updates(),
        flashcard_updates=req.flashcard_updates(),
    )
    return RecordFullUpdateResponse(
        message="Record, Cover, and Flashcards updated successfully",
        updated_flashcards=[FlashcardRead.model_validate(c) for c in updated],
    )


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_record(
    record_id: PathId,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await RecordService(session).delete_record(record_id)
    return MessageResponse(message="Record deleted successfully")
