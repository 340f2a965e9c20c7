from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from app.apis.schemas import RowId


class BookmarkTarget(BaseModel):
    cover_id: Optional[RowId] = None
    flashcard_id: Optional[RowId] = None

    @model_validator(mode="after")
    def exactly_one_target(self):
        if (self.cover_id is None) == (self.flashcard_id is None):
            raise ValueError("Provide exactly one of cover_id or flashcard_id")
        return self


class BookmarkCreate(BookmarkTarget):
    user_id: RowId


class BookmarkRead(BaseModel):
    id: int
    user_id: int
    cover_id: Optional[int] = None
    flashcard_id: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class BookmarkedCover(BaseModel):
    id: int
    record_id: int
    title: Optional[str] = None
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class BookmarkedFlashcard(BaseModel):
    id: int
    record_id: int
    sequence_number: int
    question: str
    answer: str
    hint: Optional[str] = None

    model_config = {"from_attributes": True}


class BookmarkDetail(BookmarkRead):
    cover: Optional[BookmarkedCover] = None
    flashcard: Optional[BookmarkedFlashcard] = None


class BookmarkResponse(BaseModel):
    message: str
    data: BookmarkRead


class BookmarkListResponse(BaseModel):
    bookmarks: list[BookmarkDetail] = Field(default_factory=list)
