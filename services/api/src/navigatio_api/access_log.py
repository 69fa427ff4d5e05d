import logging
import time
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


logger = logging.getLogger(__name__)
dev_logger = logging.getLogger("navigatio_api.dev")


def original_url(request: Request) -> str:
    """Path plus query string exactly as the client sent it."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


class DevRequestLogMiddleware(BaseHTTPMiddleware):
    """Concise per-request line for local development."""

    __slots__ = ()

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        dev_logger.info(
            "%s %s %s %.3f ms",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Log every request that reaches routing, in every environment."""

    __slots__ = ()

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        logger.info(
            "request",
            extra={
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "method": request.method,
                "url": original_url(request),
            },
        )
        return await call_next(request)
