"""
Blog Backend — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance
       bound to one `Database` handle.
Who:   uvicorn imports `app.main:app` (see app/__main__.py); tests call
       create_app(database=...) with their own in-memory store.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌───────────────────────────┐ ┌──────────────┐     │
    │  │ Request context (ID, log) │→│  CORS        │     │
    │  └───────────────────────────┘ └──────────────┘     │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────┐ ┌──────────────┐ ┌─────────┐  │
    │  │ POST users/signup│ │ PUT users/id │ │ /health │  │
    │  └──────────────────┘ └──────────────┘ └─────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  Conflict→400 │ NotFound→404 │ Validation/DB/*→500  │
    │  Malformed request (body, JSON) → 500               │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging → drop and recreate all tables → log address
    Shutdown: dispose the engine (the in-memory store goes with it)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import Database
from app.exceptions import (
    BlogError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.middleware.request_context import (
    RequestContextMiddleware,
    RequestIDLogFilter,
    request_id_var,
)
from app.routes import health, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s

    The request ID comes from RequestIDLogFilter on the handler, so every
    line logged while serving a request carries it ("-" otherwise).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Our own access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Recreate the schema (all existing rows are discarded)
    Shutdown:
        1. Dispose the database engine
    """
    setup_logging()
    database: Database = app.state.database

    if settings.reset_database_on_startup:
        if not database.is_ephemeral:
            logger.warning(
                "Dropping and recreating all tables on %s; existing data will be lost",
                database.engine.url.render_as_string(hide_password=True),
            )
        try:
            await database.reset()
        except Exception as e:
            logger.error("Error syncing database: %s", str(e))

    logger.info("Server running on port %d", settings.port)

    yield

    logger.info("Blog backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "request_id": request_id_var.get(""),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes.

    Handler hierarchy:
        ConflictError     → 400 Bad Request
        NotFoundError     → 404 Not Found
        ValidationError   → 500 (validation message passed through)
        RequestValidationError → 500 (malformed body or JSON)
        DatabaseError     → 500 (driver message passed through)
        BlogError (base)  → 500
        Exception         → 500 (str(exc))

    The response always carries the error's own message. Log lines get the
    request ID from RequestIDLogFilter.
    """

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.info("Conflict: %s", exc.message)
        return _error_response(400, "conflict", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("Validation error: %s", exc.message)
        return _error_response(500, "validation_error", exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # e.g. "body.name: Input should be a valid string"
        message = ",\n".join(
            "{}: {}".format(".".join(str(part) for part in err.get("loc", ())), err.get("msg", ""))
            for err in exc.errors()
        )
        logger.warning("Malformed request: %s", message)
        return _error_response(500, "validation_error", message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(BlogError)
    async def handle_blog_error(request: Request, exc: BlogError):
        logger.error("Application error: %s", exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return _error_response(500, "internal_server_error", str(exc))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Persistence handle to serve requests from. Defaults to a
                  new handle on settings.database_url.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="Blog API",
        description="Users, posts and comments over an in-memory relational store.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.database = database or Database(
        settings.database_url,
        echo=settings.log_level == "DEBUG",
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestContext → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestContextMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(users.router)
    app.include_router(health.router)

    return app


# uvicorn expects `app.main:app` to be importable
app = create_app()
