import secrets
from typing import AsyncIterator, Optional

from fastapi import Depends, Request
from fastapi_users import exceptions
from fastapi_users import schemas as fa_schemas
from fastapi_users.manager import BaseUserManager, IntegerIDMixin
from fastapi_users_db_sqlalchemy import SQLAlchemyUserDatabase

from pydantic import ConfigDict, EmailStr, Field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db.base import get_session
from app.core.db.schemas.auth import User
from app.core.logging import get_logger
from app.core.task_queue import enqueue_verification_email


logger = get_logger(__name__)


class UserNotVerified(exceptions.FastAPIUsersException):
    pass


class UserRead(fa_schemas.BaseUser[int]):
    id: int
    name: str
    email: EmailStr


class UserCreate(fa_schemas.BaseUserCreate):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=1)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Ada",
                "email": "ada@example.com",
                "password": "correct horse battery staple",
            }
        }
    )


async def get_user_db(
    session: AsyncSession = Depends(get_session),
) -> AsyncIterator[SQLAlchemyUserDatabase]:
    yield SQLAlchemyUserDatabase(session, User)


def build_verification_link(token: str, request: Optional[Request] = None) -> str:
    origin = request.headers.get("origin") if request is not None else None
    base = (origin or settings.app.public_url).rstrip("/")
    return f"{base}/auth/verify-email?token={token}"


class UserManager(IntegerIDMixin, BaseUserManager[User, int]):  # type: ignore[type-arg]
    reset_password_token_secret = settings.app.secret_key
    verification_token_secret = settings.app.secret_key

    async def on_after_register(
        self, user: User, request: Optional[Request] = None
    ) -> None:
        token = secrets.token_urlsafe(32)
        await self.user_db.update(user, {"verification_token": token})
        logger.info(f"User {user.id} registered, verification pending")
        enqueue_verification_email(
            email=user.email,
            name=user.name,
            link=build_verification_link(token, request),
        )

    async def verify_with_token(self, token: str) -> User:
        """Mark the holder of ``token`` as verified and consume the token."""
        session = self.user_db.session  # type: ignore[attr-defined]
        result = await session.execute(
            select(User).where(User.verification_token == token)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise exceptions.InvalidVerifyToken()
        user = await self.user_db.update(
            user, {"is_verified": True, "verification_token": None}
        )
        logger.info(f"User {user.id} verified")
        return user

    async def authenticate_password(self, email: str, password: str) -> User:
        """Return the verified user for the credentials or raise.

        ``UserNotExists`` and ``UserNotVerified`` are raised before the
        password is checked; ``InvalidPasswordException`` on a mismatch.
        """
        try:
            user = await self.get_by_email(email)
        except exceptions.UserNotExists:
            # Keep timing similar to the found-user path
            self.password_helper.hash(password)
            raise

        if not user.is_verified:
            raise UserNotVerified()

        verified, updated_hash = self.password_helper.verify_and_update(
            password, user.hashed_password
        )
        if not verified:
            raise exceptions.InvalidPasswordException(reason="Invalid password")
        if updated_hash is not None:
            await self.user_db.update(user, {"hashed_password": updated_hash})
        return user


async def get_user_manager(
    user_db: SQLAlchemyUserDatabase = Depends(get_user_db),
) -> AsyncIterator[UserManager]:
    yield UserManager(user_db)
