"""Campus Events - identity, session and audit backend."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import get_settings
from app.context import AppContext
from app.errors import AppError
from app.rate_limit import limiter
from app.routers import admin_router, audit_router, auth_router, events_router, organizers_router

# Logging
settings = get_settings()
logger = logging.getLogger("campus_events")
logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

APP_VERSION = "0.1.0"


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"
        return response


# --- Request size limit middleware ---
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    MAX_BODY_SIZE = 1024 * 1024  # 1MiB, requests are small JSON documents

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.MAX_BODY_SIZE:
            return JSONResponse(status_code=413, content={"message": "Request body too large"})
        return await call_next(request)


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PATHS = ("/api/v1/auth/", "/api/v1/admin/", "/api/v1/organizers", "/api/v1/events")

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        # Log sensitive operations
        path = request.url.path
        method = request.method
        if method in ("POST", "PUT", "DELETE") and path.startswith(self.AUDIT_PATHS):
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


# --- Exception handlers ---
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"message": "conflicts with existing data"})


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "internal server error"})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters are plain 400s."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "invalid request"
    return JSONResponse(status_code=400, content={"message": message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)}, headers=exc.headers)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded."""
    logger.warning("Rate limit exceeded on %s from %s", request.url.path, request.client.host if request.client else "unknown")
    return JSONResponse(status_code=429, content={"message": "Rate limit exceeded. Try again later."})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup maintenance: drop stale sessions and tokens, invite the first admin if needed."""
    ctx: AppContext = app.state.context
    for warning in ctx.settings.validate():
        logger.warning("Configuration: %s", warning)

    db = ctx.session_factory()
    try:
        purged_sessions = ctx.sessions.purge_expired(db)
        purged_tokens = ctx.password_resets.purge_expired(db)
        db.commit()
        logger.info("Startup purge: %d expired session(s), %d expired reset token(s)", purged_sessions, purged_tokens)
        ctx.invitations.bootstrap_admin(db, ctx.settings.BOOTSTRAP_ADMIN_EMAIL, ctx.settings.BOOTSTRAP_ADMIN_NAME)
    finally:
        db.close()

    yield


def create_app(context: AppContext | None = None) -> FastAPI:
    """Build the application around an explicit context."""
    if context is None:
        context = AppContext.build(settings)

    application = FastAPI(title="Campus Events", version=APP_VERSION, lifespan=lifespan)
    application.state.context = context
    application.state.limiter = limiter

    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(RequestSizeLimitMiddleware)
    application.add_middleware(AuditLogMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=context.settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type"],
    )

    application.add_exception_handler(AppError, app_error_handler)
    application.add_exception_handler(IntegrityError, integrity_error_handler)
    application.add_exception_handler(SQLAlchemyError, database_error_handler)
    application.add_exception_handler(RequestValidationError, validation_error_handler)
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(RateLimitExceeded, rate_limit_handler)

    # API routers
    application.include_router(auth_router)
    application.include_router(admin_router)
    application.include_router(organizers_router)
    application.include_router(events_router)
    application.include_router(audit_router)

    @application.get("/api/v1/health")
    def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "ok", "app": "campus-events", "version": APP_VERSION}

    return application


app = create_app()
