"""
API Middleware - Request/response processing.

Provides:
- Request ID tracking (``X-Request-ID`` in, and always out)
- Access log line with latency and whether a session cookie came along
- GalleryVoteError -> JSON with a status derived from the error code
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from galleryvote.config import get_settings
from galleryvote.config.errors import ErrorCode, GalleryVoteError

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]

REQUEST_ID_HEADER = "X-Request-ID"

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.AUTH_CODE_EXCHANGE_FAILED: 400,
    ErrorCode.SECURITY_UNAUTHORIZED: 401,
    ErrorCode.AUTH_REFRESH_FAILED: 401,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.VOTE_INVALID_DIRECTION: 422,
    # The hosted backend answered, but not with what we asked for
    ErrorCode.STORAGE_READ_FAILED: 502,
    ErrorCode.STORAGE_WRITE_FAILED: 502,
    ErrorCode.STORAGE_INVALID_ROW: 502,
    # The hosted backend could not be reached
    ErrorCode.AUTH_SESSION_UNAVAILABLE: 503,
    ErrorCode.STORAGE_CONNECTION_FAILED: 503,
}


def request_id_of(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def status_for(code: ErrorCode) -> int:
    """HTTP status for an error code; unknown codes are server errors."""
    return _STATUS_BY_CODE.get(code, 500)


def _error_response(status: int, error: dict[str, Any], request_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"error": error, "request_id": request_id},
        headers={REQUEST_ID_HEADER: request_id},
    )


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's request id or mint one, and echo it back."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        return response


class LatencyMiddleware(BaseHTTPMiddleware):
    """One access log line per request, plus ``X-Response-Time-Ms``."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.2f}"
        has_session = get_settings().session_cookie_name in request.cookies
        logger.info(
            "%s %s status=%d latency_ms=%.2f session=%s request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            "yes" if has_session else "no",
            request_id_of(request),
        )
        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn escaped exceptions into ``{"error": ..., "request_id": ...}``."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        try:
            return await call_next(request)
        except GalleryVoteError as e:
            status = status_for(e.code)
            log = logger.error if status >= 500 else logger.warning
            log(
                "%s on %s: %s details=%s request_id=%s",
                e.code.value,
                request.url.path,
                e.message,
                e.details,
                request_id_of(request),
            )
            return _error_response(status, e.to_dict(), request_id_of(request))
        except Exception:
            logger.exception(
                "Unhandled error on %s request_id=%s",
                request.url.path,
                request_id_of(request),
            )
            internal = GalleryVoteError(ErrorCode.INTERNAL_ERROR, "Internal server error")
            return _error_response(500, internal.to_dict(), request_id_of(request))
