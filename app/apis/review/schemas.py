from typing import Optional

from pydantic import BaseModel, Field


class ReviewCard(BaseModel):
    id: int
    sequence_number: int
    question: str
    answer: str
    hint: Optional[str] = None

    model_config = {"from_attributes": True}


class ReviewResponse(BaseModel):
    record_id: int
    count: int
    flashcards: list[ReviewCard] = Field(default_factory=list)
