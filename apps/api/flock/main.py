"""FastAPI application entry point."""
import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from flock.core.config import settings
from flock.core.structured_logging import build_log_context, configure_logging
from flock.db.session import engine

configure_logging()
logger = logging.getLogger(__name__)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,  # Member records never leave the service
    )
    logger.info("Sentry initialized for error tracking")

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from flock.core.rate_limit import limiter

# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Flock API",
    description="People, household and profile field administration for congregations",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Requested-With", "X-Org-Id", "X-User-Id", "X-Role"],
    expose_headers=["X-Request-ID", "Content-Disposition"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log one line per request with identifiers only (no member data)."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000

    session = getattr(request.state, "user_session", None)
    route = request.scope.get("route")
    logger.info(
        "request completed",
        extra=build_log_context(
            user_id=str(session.user_id) if session else None,
            org_id=str(session.org_id) if session else None,
            request_id=request_id,
            route=getattr(route, "path", request.url.path),
            method=request.method,
            status_code=response.status_code,
            duration_ms=duration_ms,
        ),
    )
    response.headers["X-Request-ID"] = request_id
    return response


# ============================================================================
# Error Handlers
# ============================================================================

from flock.services.csv_import_service import ImportValidationError
from flock.services.entity_client import (
    ConflictError,
    EntityClientError,
    EntityNotFoundError,
    EntityValidationError,
    UnsupportedOperationError,
)


@app.exception_handler(EntityNotFoundError)
async def entity_not_found_handler(request: Request, exc: EntityNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(EntityValidationError)
async def entity_validation_handler(request: Request, exc: EntityValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(EntityClientError)
async def entity_client_error_handler(request: Request, exc: EntityClientError):
    logger.error("Entity call failed: %s", exc, extra=build_log_context(route=request.url.path))
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(UnsupportedOperationError)
async def unsupported_handler(request: Request, exc: UnsupportedOperationError):
    return JSONResponse(status_code=501, content={"detail": str(exc)})


@app.exception_handler(ImportValidationError)
async def import_validation_handler(request: Request, exc: ImportValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": "Please fix validation errors before importing", "errors": exc.errors},
    )


# ============================================================================
# Routers
# ============================================================================

from flock.routers import (
    dashboard_router,
    entities_router,
    households_router,
    people_export_router,
    people_import_router,
    people_router,
    profile_fields_router,
    tags_router,
)

# Import/export before people so their static paths are matched first
app.include_router(people_import_router)
app.include_router(people_export_router)
app.include_router(people_router)
app.include_router(households_router)
app.include_router(tags_router)
app.include_router(profile_fields_router)
app.include_router(dashboard_router)
app.include_router(entities_router)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
