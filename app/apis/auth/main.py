from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi_users import exceptions

from app.core.errors import AuthenticationError
from app.modules.auth import (
    UserCreate,
    UserManager,
    UserNotVerified,
    UserRead,
    get_user_manager,
)
from .schemas import LoginRequest, LoginResponse, MessageResponse


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    request: Request,
    user_create: UserCreate,
    user_manager: UserManager = Depends(get_user_manager),
) -> MessageResponse:
    """Create an unverified account and send the verification mail."""
    try:
        await user_manager.create(user_create, safe=True, request=request)
    except exceptions.UserAlreadyExists:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered"
        )
    except exceptions.InvalidPasswordException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e.reason))

    return MessageResponse(
        message="User registered successfully. Please check your email to verify your account."
    )


@router.get("/verify-email", response_model=MessageResponse)
async def verify_email(
    token: str = Query(..., min_length=1),
    user_manager: UserManager = Depends(get_user_manager),
) -> MessageResponse:
    try:
        await user_manager.verify_with_token(token)
    except exceptions.InvalidVerifyToken:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid verification token."
        )
    return MessageResponse(message="Email verified successfully! You can now log in.")


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    user_manager: UserManager = Depends(get_user_manager),
) -> LoginResponse:
    """Check credentials and return the account without its password hash."""
    try:
        user = await user_manager.authenticate_password(
            credentials.email, credentials.password
        )
    except UserNotVerified:
        raise AuthenticationError("Please verify your email address before logging in.")
    except (exceptions.UserNotExists, exceptions.InvalidPasswordException):
        raise AuthenticationError("Invalid email or password")

    return LoginResponse(message="Login successful", user=UserRead.model_validate(user))
