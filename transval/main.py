"""
Transaction Validation API — FastAPI Application Factory
=========================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app(settings) is the composition root. It builds
       the engine, session factory, PasswordHasher and TokenService once and
       hangs them on `app.state`; dependencies hand them to services.
Who:   uvicorn (`uvicorn transval.main:app` or `python -m transval`) and tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware Chain:   [Request ID] → [Access Log]         │
    │                                                          │
    │  Routes:                                                 │
    │   POST /users/register      POST /auth/login             │
    │   POST /transactions/create GET  /transactions           │
    │   GET  /transactions/pending (ADMIN)                     │
    │   PATCH /transactions/{id}/status (ADMIN)                │
    │   GET  /health                                           │
    │                                                          │
    │  Exception Handlers:                                     │
    │   ValidationFailed/InvalidStateTransition→400  Dup→409   │
    │   Unauthenticated→401  Forbidden→403  NotFound→404       │
    │   StoreFailure / unexpected→500                          │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, warn about insecure settings
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from transval import __version__
from transval.config import Settings, get_settings
from transval.database import create_engine, create_session_factory, dispose_engine
from transval.exceptions import TransvalError, Unauthenticated
from transval.middleware.logging import AccessLogMiddleware
from transval.middleware.request_id import RequestIDMiddleware, request_id_var
from transval.routes import auth, health, transactions, users
from transval.services import PasswordHasher, TokenService

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (container runtimes capture it)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-operation chatter from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("Transaction Validation API starting up (env=%s)", settings.app_env)

    for warning in settings.configuration_warnings():
        logger.warning("Configuration: %s", warning)

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Transaction Validation API shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    request: Request,
    status_code: int,
    message: str,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Builds the `{statusCode, timestamp, path, error}` body every error uses."""
    return JSONResponse(
        status_code=status_code,
        content={
            "statusCode": status_code,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
            "error": message,
        },
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        TransvalError (and subclasses) → exc.status_code
        RequestValidationError         → 400 (body/path failed schema validation)
        Starlette HTTPException        → its own status (unknown route, bad method)
        Exception (fallback)           → 500

    Security: 5xx responses only ever say "Internal Server Error". Context
    and stack traces are logged server-side.
    """

    @app.exception_handler(TransvalError)
    async def handle_app_error(request: Request, exc: TransvalError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s on %s: %s | Context: %s",
                rid, type(exc).__name__, request.url.path, exc.message, exc.context,
                exc_info=exc,
            )
            return error_response(request, exc.status_code, INTERNAL_ERROR_MESSAGE)

        logger.warning("[%s] Client error on %s: %s", rid, request.url.path, exc.message)
        headers = None
        if isinstance(exc, Unauthenticated):
            headers = {"WWW-Authenticate": "Bearer"}
        return error_response(request, exc.status_code, exc.message, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Schema validation failures are 400, with one readable line per problem."""
        rid = request_id_var.get("")
        problems = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
            problems.append(f"{location}: {err.get('msg')}" if location else err.get("msg", ""))
        message = "; ".join(problems) or "Validation failed"
        logger.warning("[%s] Validation error on %s: %s", rid, request.url.path, message)
        return error_response(request, 400, message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(
            request, exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unexpected error on %s: %s",
            rid,
            request.url.path,
            str(exc),
            exc_info=True,
        )
        return error_response(request, 500, INTERNAL_ERROR_MESSAGE)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit configuration. None reads the environment.

    Raises:
        ValueError: production deployment with an insecure configuration
    """
    settings = settings or get_settings()
    settings.validate_required_for_production()

    app = FastAPI(
        title="Transaction Validation API",
        description="API for User Authentication and Transaction Management",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Composition Root ──────────────────────────────────────────────────
    engine = create_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.token_service = TokenService(
        secret=settings.jwt_secret,
        expires_minutes=settings.jwt_expires_minutes,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID wraps the access log so lines carry the ID
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(transactions.router)
    app.include_router(health.router)

    return app


# uvicorn expects `transval.main:app` to be importable
app = create_app()
