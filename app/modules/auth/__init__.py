from app.core.db.schemas.auth import User
from .users import (
    UserCreate,
    UserRead,
    UserManager,
    UserNotVerified,
    build_verification_link,
    get_user_db,
    get_user_manager,
)

__all__ = [
    "User",
    "UserCreate",
    "UserRead",
    "UserManager",
    "UserNotVerified",
    "build_verification_link",
    "get_user_db",
    "get_user_manager",
]
