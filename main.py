import uuid

from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from app.core.config import settings
from app.core.db.base import dispose_engine
from app.core.errors import register_exception_handlers
from app.core.logging import (
    bind_request_id,
    get_logger,
    reset_request_id,
    setup_logging,
)
from app.apis.auth.main import router as auth_router
from app.apis.records.main import router as records_router
from app.apis.cover.main import router as cover_router
from app.apis.flashcards.main import router as flashcards_router
from app.apis.bookmarks.main import router as bookmarks_router
from app.apis.ratings.main import router as ratings_router
from app.apis.review.main import router as review_router

import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from app.core.task_queue import queue as _bg_queue


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _bg_queue.start()
    logger.info(f"{settings.app.name} {settings.app.version} started")
    try:
        yield
    finally:
        await _bg_queue.stop()
        await dispose_engine()


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title=settings.app.name, version=settings.app.version, lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_credentials="*" not in settings.app.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        token = bind_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers["X-Request-ID"] = request_id
        return response

    app.include_router(auth_router)
    app.include_router(records_router)
    app.include_router(cover_router)
    app.include_router(flashcards_router)
    app.include_router(bookmarks_router)
    app.include_router(ratings_router)
    app.include_router(review_router)

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
        }

    return app


app = create_app()


if __name__ == "__main__":
    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.app.port,
            reload=not settings.app.is_production,
        )
    except Exception as e:
        logger.error(f"An error occurred when starting the server: {e}.")
