"""Diagnostic routes mounted under ``/api/test``."""

from __future__ import annotations

import time

from starlette.requests import Request
from starlette.routing import Route, Router

from .config import ServerConfig
from .db import ping
from .orjson_response import ORJSONResponse

_START_TIME = time.monotonic()


async def working(request: Request) -> ORJSONResponse:
    return ORJSONResponse({"success": True, "message": "Test route is working"})


def diagnostics_router(config: ServerConfig) -> Router:
    async def health(request: Request) -> ORJSONResponse:
        """Report datastore reachability and process uptime."""
        db_status = "ok" if await ping() else "down"
        return ORJSONResponse(
            {
                "success": True,
                "environment": config.environment.value,
                "db": db_status,
                "uptime_ms": int((time.monotonic() - _START_TIME) * 1000),
            }
        )

    return Router(
        routes=[
            Route("/", working),
            Route("/health", health),
        ]
    )
