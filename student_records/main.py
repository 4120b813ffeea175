"""
Student Records — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the Database handle, registers middleware,
       exception handlers and routers, and returns the app.
Who:   uvicorn (`uvicorn student_records.main:app`), `run()`, and the tests,
       which pass their own Database to create_app().
When:  Once at server startup.

Lifecycle:
    Startup:
    1. Initialize logging
    2. Verify the store is reachable (logged; the process keeps serving)
    3. Create missing tables when DB_CREATE_TABLES is set

    Shutdown:
    1. Dispose the database engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from student_records import __version__
from student_records.config import Settings, settings as default_settings
from student_records.database import Database
from student_records.exceptions import (
    DuplicateStudentError,
    NotFoundError,
    StudentRecordsError,
)
from student_records.middleware.logging import RequestLoggingMiddleware
from student_records.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    request_id_var,
)
from student_records.routes import health, students

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: standard error, so failures are visible next to uvicorn's own output.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    # Third-party libraries that log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Run startup checks before serving and dispose the engine afterwards."""
    config: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(config.log_level)
    logger.info("Student Records service starting up...")
    logger.info("Store: %s", database.safe_url)

    try:
        await database.ping()
        logger.info("Connected to database")
        if config.db_create_tables:
            await database.create_tables()
    except (OSError, SQLAlchemyError) as e:
        # No reconnection logic: requests fail with 500 until the store is back
        logger.error("Database connection error: %s", e)

    logger.info("Server is running on http://%s:%d", config.backend_host, config.backend_port)

    yield

    logger.info("Student Records service shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"message": message, "status_code": status_code, "data": None},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the {message, status_code, data: null} envelope.

    Handler hierarchy:
        NotFoundError             → 404
        RequestValidationError    → 422 (missing field, uncoercible value)
        DuplicateStudentError     → 500 (logged at WARNING)
        StudentRecordsError       → 500 (DatabaseError and other app errors)
        Exception (fallback)      → 500 (unexpected errors)

    Store internals are logged with the request ID and never returned.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _envelope(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        problems = [
            "{} ({})".format(
                ".".join(str(part) for part in error["loc"] if part != "body"),
                error["msg"],
            )
            for error in exc.errors()
        ]
        message = "Invalid request: " + ", ".join(problems)
        logger.warning("[%s] %s", rid, message)
        return _envelope(422, message)

    @app.exception_handler(DuplicateStudentError)
    async def handle_duplicate(request: Request, exc: DuplicateStudentError):
        rid = request_id_var.get("")
        logger.warning("[%s] %s | Context: %s", rid, exc.message, exc.context)
        return _envelope(exc.status_code, exc.message)

    @app.exception_handler(StudentRecordsError)
    async def handle_app_error(request: Request, exc: StudentRecordsError):
        rid = request_id_var.get("")
        logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        return _envelope(exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _envelope(500, "An unexpected error occurred")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config:    Settings to use (defaults to the module-level singleton)
        database:  Store handle to inject; built from config when omitted

    Returns: Fully configured FastAPI instance.
    """
    config = config or default_settings

    app = FastAPI(
        title="Student Records API",
        description="Create, list, read, update and delete student records.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.database = database or Database.from_settings(config)

    # Middleware executes in reverse order of addition:
    # RequestID → Logging → GZip → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(students.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(
        "student_records.main:app",
        host=default_settings.backend_host,
        port=default_settings.backend_port,
        log_level=default_settings.log_level.lower(),
    )


# uvicorn expects `student_records.main:app` to be importable
app = create_app()
