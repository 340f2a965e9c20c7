from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.apis.schemas import MessageResponse, OptionalQueryId, PathId, QueryId
from app.core.db.base import get_session
from app.core.db_services import BookmarkService
from app.core.errors import InvalidRequestError
from .schemas import (
    BookmarkCreate,
    BookmarkDetail,
    BookmarkListResponse,
    BookmarkRead,
    BookmarkResponse,
)


router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.post("", response_model=BookmarkResponse, status_code=status.HTTP_201_CREATED)
async def create_bookmark(
    req: BookmarkCreate,
    response: Response,
    session: AsyncSession = Depends(get_session),
) -> BookmarkResponse:
    """Bookmark a cover or a flashcard.

    Repeating an existing bookmark returns it unchanged with status 200.
    """
    bookmark, created = await BookmarkService(session).create_bookmark(
        user_id=req.user_id, cover_id=req.cover_id, flashcard_id=req.flashcard_id
    )
    if not created:
        response.status_code = status.HTTP_200_OK
        message = "Already bookmarked"
    elif req.cover_id is not None:
        message = "Cover bookmarked"
    else:
        message = "Flashcard bookmarked"
    return BookmarkResponse(message=message, data=BookmarkRead.model_validate(bookmark))


@router.get("/{user_id}", response_model=BookmarkListResponse)
async def list_bookmarks(
    user_id: PathId,
    session: AsyncSession = Depends(get_session),
) -> BookmarkListResponse:
    bookmarks = await BookmarkService(session).list_bookmarks(user_id)
    return BookmarkListResponse(
        bookmarks=[BookmarkDetail.model_validate(b) for b in bookmarks]
    )


@router.delete("", response_model=MessageResponse)
async def delete_bookmark(
    user_id: QueryId,
    cover_id: OptionalQueryId = None,
    flashcard_id: OptionalQueryId = None,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    if (cover_id is None) == (flashcard_id is None):
        raise InvalidRequestError("Provide exactly one of cover_id or flashcard_id")
    await BookmarkService(session).delete_bookmark(
        user_id=user_id, cover_id=cover_id, flashcard_id=flashcard_id
    )
    return MessageResponse(message="Bookmark removed")
