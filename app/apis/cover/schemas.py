from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.apis.schemas import RowId


class CoverRead(BaseModel):
    id: int
    record_id: int
    title: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CoverCreate(BaseModel):
    record_id: RowId
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None


class CoverReplace(BaseModel):
    """Full overwrite: a field left out is stored as null."""

    title: Optional[str] = Field(None, max_length=300)
    description: Optional[str] = None


class CoverResponse(BaseModel):
    message: str
    data: CoverRead


class CoverListResponse(BaseModel):
    data: list[CoverRead] = Field(default_factory=list)
