from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from app.apis.schemas import MAX_ROW_ID, RowId
from app.apis.cover.schemas import CoverRead
from app.apis.flashcards.schemas import FlashcardRead
from app.core.db.schemas.records import RecordStatus


class RecordRead(BaseModel):
    id: int
    user_id: int
    category: str
    status: RecordStatus
    created_at: datetime

    model_config = {"from_attributes": True}


class RecordCreate(BaseModel):
    user_id: RowId
    category: str = Field(..., min_length=1, max_length=200)
    status: RecordStatus


class QuestionIn(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    hint: Optional[str] = None


class RecordFullCreate(BaseModel):
    status: RecordStatus
    category: str = Field(..., min_length=1, max_length=200)
    title: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1)
    questions: list[QuestionIn]

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "Public",
                "category": "Math",
                "title": "Basic Addition",
                "description": "A set of flashcards to practice simple addition",
                "questions": [
                    {
                        "question": "What is 1 + 1?",
                        "answer": "2",
                        "hint": "It's the first even number",
                    },
                    {
                        "question": "What is 2 + 3?",
                        "answer": "5",
                        "hint": "Think of counting fingers",
                    },
                ],
            }
        }
    }


class QuestionPatch(BaseModel):
    # Entries without a number are ignored
    sequence_number: Optional[int] = Field(
        None,
        ge=1,
        le=MAX_ROW_ID,
        validation_alias=AliasChoices("sequence_number", "flashcard_num"),
    )
    question: Optional[str] = Field(None, min_length=1)
    answer: Optional[str] = Field(None, min_length=1)
    hint: Optional[str] = None

    @field_validator("question", "answer")
    @classmethod
    def not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("must not be null")
        return value

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"sequence_number"})


class RecordFullPatch(BaseModel):
    status: Optional[RecordStatus] = None
    category: Optional[str] = Field(None, min_length=1, max_length=200)
    title: Optional[str] = Field(None, max_length=300)
    description: Optional[str] = None
    questions: Optional[list[QuestionPatch]] = None

    @field_validator("status", "category")
    @classmethod
    def not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("must not be null")
        return value

    @model_validator(mode="after")
    def require_one_field(self) -> "RecordFullPatch":
        if not self.model_fields_set:
            raise ValueError("At least one field is required for update")
        return self

    def record_updates(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, include={"status", "category"})

    def cover_updates(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, include={"title", "description"})

    def flashcard_updates(self) -> list[tuple[int, dict[str, Any]]]:
        return [
            (q.sequence_number, q.changes())
            for q in self.questions or []
            if q.sequence_number is not None and q.changes()
        ]


class RecordResponse(BaseModel):
    message: str
    data: RecordRead


class RecordListResponse(BaseModel):
    records: list[RecordRead] = Field(default_factory=list)


class RecordFullResponse(BaseModel):
    message: str
    record: RecordRead
    cover: CoverRead
    flashcards: list[FlashcardRead] = Field(default_factory=list)


class RecordFullUpdateResponse(BaseModel):
    message: str
    updated_flashcards: list[FlashcardRead] = Field(
        default_factory=list, serialization_alias="updatedFlashcards"
    )
