"""
Guia Backend — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(context) wires middleware, exception handlers, one router
       per listing kind plus the comment/user/auth/health routers, and stores
       the AppContext on app.state for the dependencies to read.
Who:   uvicorn imports `guia.main:app`; tests call create_app() with their
       own context.

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware:  Request ID → Logging → GZip → CORS          │
    │                                                           │
    │  Routes:                                                  │
    │    /restaurants /hotels /taxis /gyms /supermarkets        │
    │    /tourisms /movieTheaters /emergencies                  │
    │    /comments  /users  /login  /google  /health            │
    │    /uploads   (static, MEDIA_BACKEND=local only)          │
    │                                                           │
    │  Exception Handlers:                                      │
    │    Validation→400  Unauthorized→401  Forbidden→403        │
    │    NotFound→404    Conflict→409      Media/Storage/DB→500 │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, report missing production settings
    Shutdown: dispose the context's database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from guia import __version__
from guia.context import AppContext, build_context
from guia.exceptions import (
    ConflictError,
    DatabaseError,
    FileStorageError,
    ForbiddenError,
    MediaUploadError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from guia.middleware.logging import RequestLoggingMiddleware
from guia.middleware.request_id import RequestIDMiddleware, request_id_var
from guia.routes import auth, comments, health, users
from guia.routes.listings import listing_routers

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Error interno del servidor"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once, at startup.

    Format: 2024-01-15T12:00:00 [INFO] guia.services.listing_service: Created restaurant ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    context: AppContext = app.state.context
    settings = context.settings

    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Guia Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: health checks and reads still work
        logger.error("Configuration error: %s", str(e))

    logger.info("Media backend: %s", settings.media_backend)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Guia Backend shutting down...")
    await context.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the GuiaError hierarchy to HTTP responses.

    Handler hierarchy:
        ValidationError   → 400 (with details)
        UnauthorizedError → 401
        ForbiddenError    → 403
        NotFoundError     → 404
        ConflictError     → 409
        MediaUploadError  → 500 (message returned as is)
        FileStorageError  → 500
        DatabaseError     → 500 (generic message; context logged)
        Exception         → 500 "Error interno del servidor"

    Stack traces, SQL and file paths are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return error_response(401, "unauthorized", exc.message)

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        return error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return error_response(409, "conflict", exc.message)

    @app.exception_handler(MediaUploadError)
    async def handle_media_upload_error(request: Request, exc: MediaUploadError):
        logger.error("[%s] Media upload error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "media_upload_error", exc.message)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error("[%s] File storage error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", INTERNAL_ERROR_MESSAGE)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return error_response(500, "internal_server_error", INTERNAL_ERROR_MESSAGE)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Assemble the application around `context` (built from the environment
    when omitted).
    """
    context = context or build_context()
    settings = context.settings

    app = FastAPI(
        title="Guia API",
        description=(
            "City guide directory: restaurants, hotels, taxis, gyms, supermarkets, "
            "tourism, movie theaters and emergency services, with star-rated comments."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.context = context

    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    for router in listing_routers:
        app.include_router(router)
    app.include_router(comments.router)
    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(health.router)

    if settings.media_backend == "local":
        app.mount(
            "/uploads",
            StaticFiles(directory=settings.storage_root, check_dir=False),
            name="uploads",
        )

    return app


# uvicorn guia.main:app
app = create_app()
