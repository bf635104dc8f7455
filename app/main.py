import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import models  # noqa: F401 - registers every table on Base.metadata
from app.config import Settings, settings
from app.database import Base, engine
from app.errors import InternalError, RateLimitExceeded, RSVPError
from app.logging_config import setup_logging
from app.middleware import csrf_middleware
from app.routers import admin, auth, rsvp
from app.security import SecretMaterial
from app.tokens import TokenCodec

logger = logging.getLogger(__name__)


async def rsvp_error_handler(request: Request, exc: RSVPError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitExceeded):
        headers = {"Retry-After": str(exc.retry_after)}
    if exc.status_code >= 500:
        logger.error("Request to %s failed: %s", request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": InternalError.public_message},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": InternalError.public_message},
    )


@asynccontextmanager
async def lifespan(application: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or settings
    secret = SecretMaterial.from_setting(app_settings.secret_key)

    application = FastAPI(title="Wedding RSVP API", lifespan=lifespan)
    application.state.settings = app_settings
    application.state.secret = secret
    application.state.token_codec = TokenCodec(secret)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.middleware("http")(csrf_middleware)

    application.add_exception_handler(RSVPError, rsvp_error_handler)
    application.add_exception_handler(SQLAlchemyError, database_error_handler)

    application.include_router(auth.router)
    application.include_router(rsvp.router)
    application.include_router(admin.router)

    @application.get("/health")
    def health():
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"status": "healthy"}
        except SQLAlchemyError:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy"},
            )

    return application


setup_logging()
app = create_app()
