import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from lkbb.api.endpoints import auth as auth_endpoints
from lkbb.api.endpoints import event_categories as event_category_endpoints
from lkbb.api.endpoints import events as event_endpoints
from lkbb.api.endpoints import participant_details as participant_detail_endpoints
from lkbb.api.endpoints import participants as participant_endpoints
from lkbb.api.endpoints import participations as participation_endpoints
from lkbb.api.endpoints import score_details as score_detail_endpoints
from lkbb.api.endpoints import scores as score_endpoints
from lkbb.api.endpoints import users as user_endpoints
from lkbb.api.endpoints import winners as winner_endpoints
from lkbb.core.config import DEFAULT_SECRET_KEY, Settings, get_settings
from lkbb.core.database import Database
from lkbb.core.errors import LkbbError
from lkbb.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _error_body(detail: str, code: str, field: Optional[str] = None) -> dict:
    body = {"detail": detail, "code": code}
    if field:
        body["field"] = field
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(LkbbError)
    async def lkbb_error_handler(request: Request, exc: LkbbError):
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.detail, exc.code, exc.field))

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning("Unhandled constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=_error_body("Data violates a database constraint", "conflict"),
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unexpected error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Internal server error", "internal_error"),
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    if settings.SECRET_KEY == DEFAULT_SECRET_KEY:
        logger.warning("SECRET_KEY is the development default; set it in the environment or .env")

    database = Database(settings.DATABASE_URL)
    database.create_all()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.database.dispose()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_request_timing(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    register_exception_handlers(app)

    app.include_router(auth_endpoints.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(user_endpoints.router, prefix="/api/users", tags=["Users"])
    app.include_router(event_endpoints.router, prefix="/api/events", tags=["Events"])
    app.include_router(event_category_endpoints.router, prefix="/api/event-categories", tags=["Event categories"])
    app.include_router(participant_endpoints.router, prefix="/api/participants", tags=["Participants"])
    app.include_router(
        participant_detail_endpoints.router, prefix="/api/participant-details", tags=["Participant details"]
    )
    app.include_router(score_endpoints.router, prefix="/api/scores", tags=["Scores"])
    app.include_router(score_detail_endpoints.router, prefix="/api/score-details", tags=["Score details"])
    app.include_router(winner_endpoints.router, prefix="/api/winners", tags=["Winners"])
    app.include_router(participation_endpoints.router, prefix="/api/participations", tags=["Participations"])

    @app.get("/")
    def read_root():
        return {"message": settings.APP_NAME}

    return app


if __name__ == "__main__":
    uvicorn.run("lkbb.main:create_app", factory=True, host="0.0.0.0", port=8000)
