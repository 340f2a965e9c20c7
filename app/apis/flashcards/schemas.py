from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.apis.schemas import RowId


class FlashcardRead(BaseModel):
    id: int
    record_id: int
    sequence_number: int
    question: str
    answer: str
    hint: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class FlashcardCreate(BaseModel):
    record_id: RowId
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    hint: Optional[str] = None


class FlashcardPatch(BaseModel):
    """Partial update; only fields present in the payload are written."""

    record_id: RowId
    question: Optional[str] = Field(None, min_length=1)
    answer: Optional[str] = Field(None, min_length=1)
    hint: Optional[str] = None

    @field_validator("question", "answer")
    @classmethod
    def not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("must not be null")
        return value

    @model_validator(mode="after")
    def require_one_field(self) -> "FlashcardPatch":
        if not self.changes():
            raise ValueError("At least one of question, answer or hint is required")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"record_id"})


class FlashcardResponse(BaseModel):
    message: str
    data: FlashcardRead


class FlashcardListResponse(BaseModel):
    flashcards: list[FlashcardRead] = Field(default_factory=list)
