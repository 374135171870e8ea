"""Main FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from edurank.api.v1.router import api_router
from edurank.core.config import settings
from edurank.core.database import SessionLocal, engine
from edurank.core.exceptions import AppException, InternalError, ValidationError
from edurank.middleware.logging import RequestLoggingMiddleware

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Library loggers stay quiet unless something goes wrong
for noisy in ("sqlalchemy", "sqlalchemy.engine", "python_multipart", "python_multipart.multipart"):
    logging.getLogger(noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

DESCRIPTION = """
EduRank result management API.

Marks are stored per class, subject and exam period. Result sheets compute
totals, percentages, pass/fail status and ranks on every request.

Staff authenticate with a username and password, students with their class,
roll number and password. Send the access token as
`Authorization: Bearer <token>`.

Errors use the envelope
`{"success": false, "error": {"code", "message", "details"}}`.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s v%s", settings.APP_NAME, settings.APP_VERSION)
    yield
    logger.info("Shutting down %s", settings.APP_NAME)
    engine.dispose()


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error through the application envelope."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.envelope())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        error = ValidationError(
            "Request validation failed",
            details={
                "errors": [
                    {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
                    for e in exc.errors()
                ]
            },
        )
        return JSONResponse(status_code=error.status_code, content=error.envelope())

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        error = InternalError("An internal server error occurred")
        return JSONResponse(status_code=error.status_code, content=error.envelope())


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=DESCRIPTION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health", tags=["Health"])
    def health_check():
        """Liveness plus a database round trip."""
        database = "ok"
        try:
            with SessionLocal() as session:
                session.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.warning("Health check could not reach the database", exc_info=True)
            database = "unavailable"

        return {
            "status": "healthy" if database == "ok" else "degraded",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "database": database,
        }

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "edurank.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
