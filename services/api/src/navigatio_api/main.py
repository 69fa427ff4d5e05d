"""API application factory using Starlette."""

from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator, Mapping, Optional

from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.types import ASGIApp

from .access_log import AccessLogMiddleware, DevRequestLogMiddleware
from .config import ServerConfig
from .db import close_client
from .diagnostics import diagnostics_router
from .middleware_body import BodyParsingMiddleware
from .middleware_cors import OriginPolicyMiddleware
from .middleware_errors import ErrorHandlerMiddleware, http_exception_handler
from .responder import fallback_routes
from .routes import RouteTable, api_route_table
from .static import UploadsMiddleware

logger = logging.getLogger(__name__)


def build_middleware(config: ServerConfig) -> list[Middleware]:
    """Request stages, outermost first."""
    middleware = [
        Middleware(ErrorHandlerMiddleware, config=config),
        Middleware(OriginPolicyMiddleware, config=config),
        Middleware(BodyParsingMiddleware, max_request_bytes=config.max_request_bytes),
    ]
    if config.is_development:
        middleware.append(Middleware(DevRequestLogMiddleware))
    middleware.extend(
        [
            Middleware(UploadsMiddleware, directory=config.uploads_dir),
            Middleware(AccessLogMiddleware),
        ]
    )
    return middleware


@contextlib.asynccontextmanager
async def lifespan(app: Starlette) -> AsyncIterator[None]:
    yield
    await close_client()


def create_app(
    config: ServerConfig,
    collaborators: Optional[Mapping[str, ASGIApp]] = None,
    *,
    route_table: Optional[RouteTable] = None,
) -> Starlette:
    """Compose the ingress pipeline for ``config``.

    ``collaborators`` maps route module names (see ``routes.API_ROUTES``) to
    the ASGI apps mounted under their prefixes.  Each call returns an
    independent application.
    """

    if route_table is None:
        installed = {"diagnostics": diagnostics_router(config)}
        installed.update(collaborators or {})
        route_table = api_route_table(installed)
    for prefix in route_table.prefixes():
        logger.info("route_registered", extra={"prefix": prefix})

    app = Starlette(
        routes=route_table.routes() + fallback_routes(config),
        middleware=build_middleware(config),
        exception_handlers={HTTPException: http_exception_handler},
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.route_table = route_table
    logger.info(
        "app_created",
        extra={"environment": config.environment.value, "routes": len(route_table)},
    )
    return app
