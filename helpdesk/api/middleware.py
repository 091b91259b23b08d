"""
HTTP middleware for the helpdesk API.

- RequestContextMiddleware: assigns the request id and binds it, together
  with the caller's ``X-User-Id``, to the logging context.
- AccessLogMiddleware: one log line per request with status and duration;
  unhandled exceptions are logged with the request context and re-raised.
- ResponseHeadersMiddleware: security headers, and ``Cache-Control: no-store``
  because every API response is scoped to the calling user.

WebSocket connections bypass these; the realtime endpoint logs on its own.
"""
from __future__ import annotations

import time
import uuid
from typing import Callable, Dict

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from helpdesk.config.settings import settings
from helpdesk.core.logging import get_logger, request_id as request_id_var, user_id as user_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"
CALLER_HEADER = "X-User-Id"

# Health checks hit these constantly; log them at debug only
QUIET_PATHS = frozenset({"/health", f"{settings.API_V1_STR}/health"})


def _security_headers() -> Dict[str, str]:
    headers = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "no-referrer",
        "Cache-Control": "no-store",
    }
    if settings.is_production():
        headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return headers


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Reuse or mint a request id and expose it to logs and the response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        # Unverified until get_actor resolves the profile, but useful in logs
        rid_token = request_id_var.set(request_id)
        uid_token = user_id_var.set(request.headers.get(CALLER_HEADER))
        try:
            response = await call_next(request)
        finally:
            user_id_var.reset(uid_token)
            request_id_var.reset(rid_token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Time each request and log its outcome."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        path = request.url.path
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                f"{request.method} {path} failed: {exc}",
                extra={"method": request.method, "path": path, "error_type": type(exc).__name__},
            )
            raise

        elapsed = time.perf_counter() - start
        response.headers[PROCESS_TIME_HEADER] = f"{elapsed:.4f}"

        fields = {
            "method": request.method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": round(elapsed * 1000, 1),
        }
        message = f"{request.method} {path} -> {response.status_code} ({fields['duration_ms']}ms)"
        if response.status_code >= 500:
            logger.error(message, extra=fields)
        elif response.status_code >= 400:
            logger.warning(message, extra=fields)
        elif path in QUIET_PATHS:
            logger.debug(message, extra=fields)
        else:
            logger.info(message, extra=fields)
        return response


class ResponseHeadersMiddleware(BaseHTTPMiddleware):

    def __init__(self, app, headers: Dict[str, str]):
        super().__init__(app)
        self.headers = headers

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response


def register_middlewares(app: FastAPI) -> None:
    """
    Install the middleware stack.

    The last middleware added runs first, so the request context wraps the
    access log and every log line carries the request id.
    """
    app.add_middleware(ResponseHeadersMiddleware, headers=_security_headers())
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestContextMiddleware)
    logger.debug("HTTP middlewares registered")
