from typing import Annotated, Optional

from fastapi import Path, Query
from pydantic import BaseModel, Field


# Upper bound of an INTEGER primary key column
MAX_ROW_ID = 2**31 - 1

RowId = Annotated[int, Field(ge=1, le=MAX_ROW_ID)]
PathId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]
QueryId = Annotated[int, Query(ge=1, le=MAX_ROW_ID)]
OptionalQueryId = Annotated[Optional[int], Query(ge=1, le=MAX_ROW_ID)]


class MessageResponse(BaseModel):
    message: str
