from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.apis.schemas import RowId
from app.core.db.schemas.records import RecordStatus


class RatingCreate(BaseModel):
    user_id: RowId
    record_id: RowId
    value: int = Field(..., ge=1, le=5, strict=True)


class RatingRead(BaseModel):
    id: int
    user_id: int
    record_id: int
    value: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RatingResponse(BaseModel):
    message: str
    data: RatingRead


class RatingAverageResponse(BaseModel):
    record_id: int
    average_rating: str
    count: int


class TopRatedRead(BaseModel):
    record_id: int
    category: str
    status: RecordStatus
    title: Optional[str] = None
    average_rating: str
    count: int


class TopRatedResponse(BaseModel):
    records: list[TopRatedRead] = Field(default_factory=list)
