"""
Middleware for request tracking, origin checks, body limits, rate limiting
and security headers.
"""
import time
import uuid
from typing import Callable

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send
from structlog.contextvars import bind_contextvars, clear_contextvars

from .config import Settings
from .errors import CrossOriginRejected
from .logging_config import get_logger

logger = get_logger(__name__)

# Rate limiter shared with the routers, which apply it with @limiter.limit
limiter = Limiter(key_func=get_remote_address)
_rate_limit = "120/minute"


def current_rate_limit() -> str:
    """Limit string for the running app, set by install_middleware."""
    return _rate_limit

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
}


async def request_id_middleware(request: Request, call_next: Callable) -> Response:
    """
    Add unique request_id to each request for tracing.
    Binds request_id to structlog context for all logs in this request.
    """
    request_id = request.headers.get('X-Request-ID', str(uuid.uuid4()))

    clear_contextvars()
    bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
    )
    request.state.request_id = request_id

    logger.info(
        "request_started",
        client_host=request.client.host if request.client else None,
    )

    start_time = time.time()

    try:
        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

        response.headers['X-Request-ID'] = request_id
        return response

    except Exception as exc:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            "request_failed",
            exc_info=exc,
            duration_ms=round(duration_ms, 2),
        )
        raise
    finally:
        clear_contextvars()


async def security_headers_middleware(request: Request, call_next: Callable) -> Response:
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


async def origin_guard_middleware(request: Request, call_next: Callable) -> Response:
    """
    Reject browser requests from origins outside ALLOWED_ORIGINS.
    Requests without an Origin header (Stripe, curl, same-origin) pass.
    """
    origin = request.headers.get("origin")
    allowed = request.app.state.settings.ALLOWED_ORIGINS
    if origin and origin not in allowed:
        exc = CrossOriginRejected(origin)
        logger.warning("cross_origin_rejected", origin=origin)
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)
    return await call_next(request)


class BodyLimitMiddleware:
    """
    Cap request bodies at the route limit (webhook vs JSON routes).

    A declared Content-Length over the limit is refused before anything is
    read. Bodies without one (chunked) are counted as they are received and
    the read fails with 413 as soon as the limit is passed.
    """

    def __init__(self, app: ASGIApp, json_limit: int, webhook_limit: int):
        self.app = app
        self.json_limit = json_limit
        self.webhook_limit = webhook_limit

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = self.webhook_limit if scope["path"] == "/webhook" else self.json_limit
        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                size = int(content_length)
            except ValueError:
                response = JSONResponse({"error": "Invalid Content-Length"}, status_code=400)
                await response(scope, receive, send)
                return
            if size > limit:
                logger.warning("request_body_too_large", size=size, limit=limit)
                response = JSONResponse({"error": "Payload too large"}, status_code=413)
                await response(scope, receive, send)
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    logger.warning("request_body_too_large", size=received, limit=limit)
                    raise HTTPException(status_code=413, detail="Payload too large")
            return message

        await self.app(scope, limited_receive, send)


def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors."""
    retry_after = exc.limit.limit.get_expiry()
    logger.warning("rate_limit_exceeded", limit=str(exc.detail))
    return JSONResponse(
        {"error": "Rate limit exceeded", "retry_after": retry_after},
        status_code=429,
        headers={"Retry-After": str(retry_after)},
    )


def install_middleware(app: FastAPI, settings: Settings) -> None:
    """Install all middleware on the FastAPI app.

    Middleware is added in reverse order (last added = outermost = runs first).
    """
    global _rate_limit

    # 6. Body size limit (innermost)
    app.add_middleware(
        BodyLimitMiddleware,
        json_limit=settings.JSON_BODY_LIMIT,
        webhook_limit=settings.WEBHOOK_BODY_LIMIT,
    )

    # 5. Rate limiting, checked by the route decorators; counters start fresh per app
    _rate_limit = settings.RATE_LIMIT
    limiter.reset()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # 4. CORS headers for allowed origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # 3. Origin allow-list, before any route runs
    app.middleware("http")(origin_guard_middleware)

    # 2. Request tracing
    app.middleware("http")(request_id_middleware)

    # 1. Security headers (outermost, so rejections carry them too)
    app.middleware("http")(security_headers_middleware)
