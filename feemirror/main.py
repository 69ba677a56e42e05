"""FastAPI Application Entry Point"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from feemirror.config import settings
from feemirror.core.logging import setup_logging, get_logger
from feemirror.core.middleware import (
    ReadOnlyMiddleware,
    RequestIDMiddleware,
    RequestTimingMiddleware,
    SecurityHeadersMiddleware
)
from feemirror.api.v1.router import api_router
from feemirror.schemas.responses import ErrorDetail, ErrorResponse
from feemirror.services.dashboard_service import DashboardService
from feemirror.services.firestore_client import FirestoreClient
from feemirror.services.mirror_sync import MirrorSync, load_seed_file
from feemirror.services.snapshot_store import DebouncedRecompute, SnapshotStore

# Setup logging
setup_logging()
logger = get_logger(__name__)


# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    enabled=settings.RATE_LIMIT_ENABLED,
)


def init_mirror_state(app: FastAPI) -> SnapshotStore:
    """Attach a fresh snapshot store and dashboard cache to the app"""
    store = SnapshotStore()
    app.state.store = store
    app.state.dashboard = DebouncedRecompute(
        store, DashboardService.build_summary, settings.SNAPSHOT_DEBOUNCE_SECONDS
    )
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting application", extra={"environment": settings.ENVIRONMENT})

    if settings.MIRROR_SEED_FILE:
        load_seed_file(settings.MIRROR_SEED_FILE, app.state.store)

    sync: Optional[MirrorSync] = None
    if settings.mirror_enabled:
        sync = MirrorSync(app.state.store, FirestoreClient.from_settings())
        sync.start()
    else:
        logger.info("Firestore project not configured; mirror sync disabled")

    yield

    # Shutdown
    logger.info("Shutting down application")
    if sync is not None:
        await sync.stop()
    await app.state.dashboard.aclose()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Read-only mirror of the school fee desktop app",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)
init_mirror_state(app)

# Add rate limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS"],
    allow_headers=[settings.ALLOWED_HEADERS],
    expose_headers=["X-Request-ID", "X-Process-Time"],
)

# Custom middleware
app.add_middleware(ReadOnlyMiddleware, prefix=settings.API_V1_PREFIX)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestTimingMiddleware)
app.add_middleware(RequestIDMiddleware)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


# Health check endpoints
@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Basic health check endpoint, with the age of each mirrored collection"""
    store: SnapshotStore = request.app.state.store
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "mirror": {
            "enabled": settings.mirror_enabled,
            "snapshot_version": store.version,
            "collections": {
                name: updated.isoformat() for name, updated in store.updated_at.items()
            },
        },
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health"
    }


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors"""
    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "errors": exc.errors(),
            "correlation_id": getattr(request.state, "request_id", None),
        }
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "correlation_id": getattr(request.state, "request_id", None),
        },
        exc_info=True
    )
    body = ErrorResponse(error=ErrorDetail(code="INTERNAL_ERROR", message="Internal server error"))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "feemirror.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
