"""
Online Retail API - FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, exception mapping
       and database lifecycle in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn retail_api.main:app` or `python -m retail_api`) and tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Req ID      │→│ RateLim  │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │ /products    │ │ /health  │ │ /api-docs       │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation/Conflict→400 │ NotFound→404 │ DB→500 │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → Database (pool) → optional create_all
    Shutdown: dispose the engine, closing every pooled connection
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from retail_api import __version__
from retail_api.config import settings
from retail_api.database import Database
from retail_api.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    RetailAPIError,
    ValidationError,
)
from retail_api.middleware.logging import RequestLoggingMiddleware
from retail_api.middleware.rate_limit import RateLimitMiddleware
from retail_api.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from retail_api.routes import health, products

logger = logging.getLogger(__name__)

API_TITLE = "Online Retail API"
API_DESCRIPTION = (
    "A simple CRUD API for online retail data backed by PostgreSQL. "
    "Products are identified by their stock code."
)
DOCS_URL = "/api-docs"
OPENAPI_URL = "/api-docs/openapi.json"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access middleware replaces uvicorn's access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Own the Database for the lifetime of the process.

    A Database passed to create_app() is reused; otherwise one is built from
    settings. Either way it is disposed on shutdown.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("%s %s starting up...", API_TITLE, __version__)

    database: Optional[Database] = getattr(app.state, "db", None)
    if database is None:
        database = Database.from_settings(settings)
        app.state.db = database

    if settings.db_create_tables:
        await database.create_all()
        logger.info("Database tables ensured")

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("API docs: http://%s:%d%s", settings.host, settings.port, DOCS_URL)
    logger.info("=" * 60)

    yield

    logger.info("%s shutting down...", API_TITLE)
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(
    error: str,
    message: str,
    details: Any = None,
    request_id: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": error, "message": message}
    if details:
        body["details"] = details
    body["request_id"] = request_id if request_id is not None else request_id_var.get("")
    return body


def _validation_details(exc: RequestValidationError) -> List[Dict[str, str]]:
    """Flattens Pydantic error entries into JSON-safe {field, message} pairs."""
    details = []
    for err in exc.errors():
        # loc is ("body", "quantity") or ("query", "limit")
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body",)]
        details.append({
            "field": ".".join(loc) or "body",
            "message": str(err.get("msg", "Invalid value")),
        })
    return details


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        RequestValidationError → 400 (schema failure, FastAPI would say 422)
        ValidationError        → 400
        ConflictError          → 400 (duplicate stock_code)
        NotFoundError          → 404
        DatabaseError          → 500 (generic message, details logged)
        RetailAPIError (base)  → 500
        HTTPException          → its own status (unknown routes, 405s)
        Exception (fallback)   → 500

    Internal details never reach the response body.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = _validation_details(exc)
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), details)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", "Request validation failed", details),
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.warning("[%s] Conflict: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("conflict", exc.message),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(RetailAPIError)
    async def handle_application_error(request: Request, exc: RetailAPIError):
        logger.error(
            "[%s] Application error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        error = {404: "not_found", 405: "method_not_allowed"}.get(exc.status_code, "http_error")
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(error, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all: the stack trace is logged, the client gets a generic 500.

        Starlette runs this handler outside every middleware, after the
        request ID context has been reset, so the ID comes from request.state
        and the header is set here.
        """
        rid = getattr(request.state, "request_id", "")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
                request_id=rid,
            ),
            headers={REQUEST_ID_HEADER: rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    database: Optional[Database] = None,
    rate_limit: Optional[bool] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Pre-built Database to serve requests with. Tests pass one
                  bound to a throwaway SQLite file; production leaves it None
                  and the lifespan builds one from settings.
        rate_limit: Overrides settings.rate_limit_enabled when not None.
    """
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=__version__,
        docs_url=DOCS_URL,
        redoc_url=f"{DOCS_URL}/redoc",
        openapi_url=OPENAPI_URL,
        servers=[
            {"url": f"http://localhost:{settings.port}", "description": "Development server"},
        ],
        lifespan=lifespan,
    )
    if database is not None:
        app.state.db = database

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → RateLimit → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)

    if rate_limit is None:
        rate_limit = settings.rate_limit_enabled
    if rate_limit:
        app.add_middleware(RateLimitMiddleware)

    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(products.router)
    app.include_router(health.router)

    return app


# uvicorn expects `retail_api.main:app` to be importable
app = create_app()
