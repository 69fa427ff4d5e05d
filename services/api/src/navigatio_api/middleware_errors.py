"""Terminal error handler shared by every route."""

from __future__ import annotations

import logging

from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .config import ServerConfig
from .errors import ApiError, error_response, internal_error

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    """Render framework errors (404, 405 from sub-routers) in the JSON shape."""
    response = error_response(str(exc.detail), exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn exceptions raised further down the chain into JSON errors.

    Unexpected exceptions are logged with their traceback.  Production clients
    only ever see a generic message; development clients get ``str(exc)``.
    """

    def __init__(self, app, config: ServerConfig) -> None:
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        try:
            return await call_next(request)
        except ApiError as exc:
            logger.info(
                "request_rejected",
                extra={
                    "path": request.url.path,
                    "status": exc.status_code,
                    "error": exc.message,
                },
            )
            response = error_response(exc.message, exc.status_code)
        except Exception as exc:
            logger.exception(
                "unhandled_error",
                extra={"method": request.method, "path": request.url.path},
            )
            if self.config.is_development:
                response = internal_error(str(exc))
            else:
                response = internal_error()
        # Errors raised past the origin check still carry its CORS headers.
        response.headers.update(getattr(request.state, "cors_headers", {}))
        return response
