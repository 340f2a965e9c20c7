"""Exception hierarchy and the JSON error envelope.

Every error leaves the API as ``{"error": <message>}`` with a matching status
code. Services raise the exceptions defined here; routers may still raise
``HTTPException`` for request-level problems.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.logging import get_logger


logger = get_logger(__name__)


class CardlyError(Exception):
    """Base exception for all Cardly errors."""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"error": self.message}


class NotFoundError(CardlyError):
    """Target row is absent."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class InvalidRequestError(CardlyError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class AuthenticationError(CardlyError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED)


class CompositeWriteError(CardlyError):
    """A multi-entity write failed and was rolled back as a whole."""

    def __init__(self, stage: str, reason: str) -> None:
        self.stage = stage
        self.reason = reason
        super().__init__(f"Failed to write {stage}: {reason}")

    def to_payload(self) -> dict:
        return {"error": self.message, "stage": self.stage}


def store_error_message(exc: BaseException) -> str:
    """Message of a database error as it may be shown to clients."""
    if not settings.app.expose_store_errors:
        return "Internal server error"
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc)


def format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        fields = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        prefix = ".".join(fields)
        messages.append(f"{prefix}: {err['msg']}" if prefix else err["msg"])
    return "; ".join(messages) or "Invalid request"


async def _cardly_error_handler(request: Request, exc: CardlyError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": format_validation_errors(exc)},
    )


async def _store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"Store error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": store_error_message(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CardlyError, _cardly_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _store_error_handler)  # type: ignore[arg-type]


__all__ = [
    "CardlyError",
    "NotFoundError",
    "InvalidRequestError",
    "AuthenticationError",
    "CompositeWriteError",
    "store_error_message",
    "register_exception_handlers",
]
