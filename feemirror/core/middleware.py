"""Custom Middleware"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from feemirror.core.logging import get_logger
from feemirror.schemas.responses import ErrorDetail, ErrorResponse

logger = get_logger(__name__)

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add unique request ID to each request"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Log request processing time"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        logger.info(
            f"{request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time": process_time,
                "correlation_id": getattr(request.state, "request_id", None),
            }
        )

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class ReadOnlyMiddleware(BaseHTTPMiddleware):
    """Reject every mutating request under the API prefix; records are changed in the desktop app"""

    def __init__(self, app: ASGIApp, prefix: str) -> None:
        super().__init__(app)
        self.prefix = prefix

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method not in SAFE_METHODS and request.url.path.startswith(self.prefix):
            logger.warning(
                "Rejected write request to read-only mirror",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "correlation_id": getattr(request.state, "request_id", None),
                },
            )
            body = ErrorResponse(
                error=ErrorDetail(
                    code="READ_ONLY_MIRROR",
                    message="This dashboard is read-only. Use the desktop app to change records.",
                )
            )
            return JSONResponse(
                status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
                content=body.model_dump(),
                headers={"Allow": ", ".join(sorted(SAFE_METHODS))},
            )
        return await call_next(request)
