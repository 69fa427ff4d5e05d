"""Origin checks, preflight handling and CORS response headers."""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .config import ServerConfig
from .errors import CORSPolicyError
from .origin_policy import (
    ALLOWED_HEADERS,
    ALLOWED_METHODS,
    EXPOSED_HEADERS,
    is_allowed,
)

logger = logging.getLogger(__name__)


def cors_headers(origin: str | None) -> dict[str, str]:
    """Headers for a response to an accepted request from ``origin``."""
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
        "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
        "Access-Control-Expose-Headers": ", ".join(EXPOSED_HEADERS),
        "Vary": "Origin",
    }
    if origin:
        headers["Access-Control-Allow-Origin"] = origin
    return headers


class OriginPolicyMiddleware(BaseHTTPMiddleware):
    """Answer preflights and reject requests from disallowed origins."""

    def __init__(self, app, config: ServerConfig) -> None:
        super().__init__(app)
        self.config = config

    def _check(self, request: Request, origin: str | None) -> None:
        if not is_allowed(origin, self.config.environment, self.config.origin_policy):
            logger.warning(
                "cors_blocked",
                extra={"origin": origin, "headers": dict(request.headers)},
            )
            raise CORSPolicyError(origin)

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        origin = request.headers.get("origin")
        self._check(request, origin)

        if request.method == "OPTIONS":
            headers = cors_headers(origin)
            headers["Access-Control-Max-Age"] = str(self.config.cors_max_age)
            return Response(status_code=204, headers=headers)

        headers = cors_headers(origin)
        request.state.cors_headers = headers
        response = await call_next(request)
        for key, value in headers.items():
            if key == "Vary" and "vary" in response.headers:
                if "origin" not in response.headers["vary"].lower():
                    response.headers["Vary"] = f"{response.headers['vary']}, Origin"
                continue
            response.headers[key] = value
        return response
