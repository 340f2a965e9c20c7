from pydantic import BaseModel, Field

from app.apis.schemas import MessageResponse
from app.modules.auth import UserRead


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    message: str
    user: UserRead


__all__ = ["MessageResponse", "LoginRequest", "LoginResponse"]
