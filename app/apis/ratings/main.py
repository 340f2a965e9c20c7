from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.apis.schemas import MessageResponse, PathId, QueryId
from app.core.db.base import get_session
from app.core.db_services import RatingService
from .schemas import (
    RatingAverageResponse,
    RatingCreate,
    RatingRead,
    RatingResponse,
    TopRatedRead,
    TopRatedResponse,
)


router = APIRouter(prefix="/ratings", tags=["ratings"])

NO_RATINGS = "No ratings yet"


def format_average(average: Optional[float]) -> str:
    if average is None:
        return NO_RATINGS
    return f"{average:.2f}"


@router.post("", response_model=RatingResponse)
async def rate_record(
    req: RatingCreate,
    session: AsyncSession = Depends(get_session),
) -> RatingResponse:
    """Store the caller's rating; a second rating of the same record replaces the first."""
    rating = await RatingService(session).upsert_rating(
        user_id=req.user_id, record_id=req.record_id, value=req.value
    )
    return RatingResponse(
        message="Rating saved successfully", data=RatingRead.model_validate(rating)
    )


@router.get("/top-rated", response_model=TopRatedResponse)
async def top_rated(
    limit: int = Query(10, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> TopRatedResponse:
    rows = await RatingService(session).top_rated(limit)
    return TopRatedResponse(
        records=[
            TopRatedRead(
                record_id=row.record_id,
                category=row.category,
                status=row.status,
                title=row.title,
                average_rating=format_average(row.average),
                count=row.count,
            )
            for row in rows
        ]
    )


@router.get("/average/{record_id}", response_model=RatingAverageResponse)
async def average_rating(
    record_id: PathId,
    session: AsyncSession = Depends(get_session),
) -> RatingAverageResponse:
    summary = await RatingService(session).summarize(record_id)
    return RatingAverageResponse(
        record_id=record_id,
        average_rating=format_average(summary.average),
        count=summary.count,
    )


@router.delete("", response_model=MessageResponse)
async def delete_rating(
    user_id: QueryId,
    record_id: QueryId,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await RatingService(session).delete_rating(user_id=user_id, record_id=record_id)
    return MessageResponse(message="Rating deleted successfully")
