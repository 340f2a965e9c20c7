from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.apis.schemas import MessageResponse, OptionalQueryId, PathId, QueryId
from app.core.db.base import get_session
from app.core.db_services import CoverService
from .schemas import (
    CoverCreate,
    CoverListResponse,
    CoverRead,
    CoverReplace,
    CoverResponse,
)


router = APIRouter(prefix="/cover", tags=["cover"])


@router.get("", response_model=CoverListResponse)
async def list_covers(
    record_id: OptionalQueryId = None,
    query: Optional[str] = Query(None, description="Case-insensitive title search"),
    session: AsyncSession = Depends(get_session),
) -> CoverListResponse:
    covers = await CoverService(session).list_covers(record_id=record_id, query=query)
    return CoverListResponse(data=[CoverRead.model_validate(c) for c in covers])


@router.post("", response_model=CoverResponse, status_code=status.HTTP_201_CREATED)
async def create_cover(
    req: CoverCreate,
    session: AsyncSession = Depends(get_session),
) -> CoverResponse:
    cover = await CoverService(session).create_cover(
        record_id=req.record_id, title=req.title, description=req.description
    )
    return CoverResponse(
        message="Cover created successfully", data=CoverRead.model_validate(cover)
    )


@router.put("/{record_id}", response_model=CoverResponse)
async def replace_cover(
    record_id: PathId,
    req: CoverReplace,
    session: AsyncSession = Depends(get_session),
) -> CoverResponse:
    cover = await CoverService(session).replace_cover(
        record_id, title=req.title, description=req.description
    )
    return CoverResponse(
        message="Cover updated successfully", data=CoverRead.model_validate(cover)
    )


@router.delete("/{record_id}", response_model=MessageResponse)
async def delete_cover(
    record_id: PathId,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await CoverService(session).delete_cover(record_id)
    return MessageResponse(message="Cover deleted successfully")
