"""
OM Spiritual Backend - FastAPI Application Factory
===================================================

What:  Builds and configures the FastAPI application.
How:   `create_app()` assembles the storage context, middleware, exception
       handlers and routers; `app` at module level is what uvicorn serves
       (`uvicorn omspiritual.main:app`).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Access Log → GZip → CORS │
    │                                                     │
    │  Routers:  auth · chants · moods · ai · payments    │
    │            admin (admin role) · health              │
    │                                                     │
    │  Exception handlers:                                │
    │    400 validation · 401 auth · 403 forbidden        │
    │    404 not found · 409 conflict · 500 config/db     │
    │    502 payment provider · 500 catch-all             │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → warn about insecure defaults → create tables and
              seed catalog (idempotent)
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from omspiritual import __version__
from omspiritual.config import settings
from omspiritual.database import Database
from omspiritual.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    OmSpiritualError,
    PaymentServiceError,
    PermissionDeniedError,
    ValidationError,
)
from omspiritual.middleware.logging import RequestLoggingMiddleware
from omspiritual.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from omspiritual.routes import admin, ai, auth, chants, health, moods, payments

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure root logging once, at startup.

    Format: 2026-01-15T12:00:00 [INFO] omspiritual.services.mood_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party chatter
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("OM Spiritual Backend %s starting up...", __version__)

    for problem in settings.insecure_defaults_in_use():
        logger.warning("Configuration: %s", problem)

    database: Database = app.state.db
    await database.init_schema()
    logger.info("Database ready: %s", database.engine.url.render_as_string(hide_password=True))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("OM Spiritual Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    rid = request_id_var.get("")
    content: Dict[str, Any] = {
        "error": error,
        "message": message,
        "request_id": rid,
    }
    if details:
        content["details"] = details
    # The catch-all 500 is sent from outside RequestIDMiddleware, so the
    # header is set here as well
    headers = dict(headers or {})
    if rid:
        headers[REQUEST_ID_HEADER] = rid
    return JSONResponse(status_code=status_code, content=content, headers=headers or None)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the ErrorResponse envelope.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        AuthenticationError                      → 401
        PermissionDeniedError                    → 403
        NotFoundError                            → 404
        ConflictError                            → 409
        ConfigurationError                       → 500
        DatabaseError                            → 500
        PaymentServiceError                      → 502
        OmSpiritualError (base)                  → 500
        Exception (fallback)                     → 500

    Responses never contain stack traces, SQL or exception context beyond
    what a handler copies in explicitly.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Body/query failed schema validation (e.g. mood rating 6)."""
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        logger.info("[%s] Request validation failed: %d error(s)", request_id_var.get(""), len(errors))
        return _error_response(400, "validation_error", "Request validation failed", {"errors": errors})

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        details = {"field": exc.field} if exc.field else None
        return _error_response(400, "validation_error", exc.message, details)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        # exc.reason stays in the logs (dependencies.py / services)
        return _error_response(
            401,
            "unauthorized",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(PermissionDeniedError)
    async def handle_permission_denied(request: Request, exc: PermissionDeniedError):
        return _error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return _error_response(409, "conflict", exc.message)

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.error("[%s] Configuration error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "configuration_error", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(PaymentServiceError)
    async def handle_payment_error(request: Request, exc: PaymentServiceError):
        logger.error("[%s] Payment provider error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(502, "payment_service_error", exc.message)

    @app.exception_handler(OmSpiritualError)
    async def handle_app_error(request: Request, exc: OmSpiritualError):
        logger.error("[%s] Unhandled application error %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Unknown routes, wrong methods and other framework-level errors."""
        return _error_response(
            exc.status_code,
            "http_error",
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: storage context to serve from. Defaults to one built from
            settings.database_url. Tests pass a Database over a temporary
            SQLite file that they have already initialized.
    """
    app = FastAPI(
        title="OM Spiritual API",
        description=(
            "Meditation and wellness backend: accounts, chant catalog, mood journal, "
            "AI recommendations and PRO subscriptions."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.db = database or Database()

    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
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

    app.include_router(auth.router)
    app.include_router(chants.router)
    app.include_router(moods.router)
    app.include_router(ai.router)
    app.include_router(payments.router)
    app.include_router(admin.router)
    app.include_router(health.router)

    return app


app = create_app()
