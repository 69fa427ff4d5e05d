"""Routes that answer requests no API route claimed.

Production serves the built frontend and falls back to its entry document so
client-side routing works.  Development answers with a status line, a JSON
404 for unknown API paths and a redirect to the frontend dev origin for the
rest.  The branch is picked once, when the application is built.
"""

from __future__ import annotations

from pathlib import Path

from starlette.requests import Request
from starlette.responses import (
    FileResponse,
    PlainTextResponse,
    RedirectResponse,
    Response,
)
from starlette.routing import BaseRoute, Route

from .access_log import original_url
from .config import ServerConfig
from .errors import not_found
from .routes import ALL_METHODS
from .static import resolve_within

ENTRY_DOCUMENT = "index.html"
DEV_STATUS_TEXT = "Navigatio API is running in development mode..."


def production_routes(build_dir: Path) -> list[BaseRoute]:
    async def frontend(request: Request) -> Response:
        if request.method not in ("GET", "HEAD"):
            return not_found("Not found")
        asset = resolve_within(build_dir, request.path_params["path"])
        return FileResponse(asset or build_dir / ENTRY_DOCUMENT)

    return [Route("/{path:path}", frontend, methods=ALL_METHODS)]


def development_routes(redirect_origin: str) -> list[BaseRoute]:
    async def status(request: Request) -> PlainTextResponse:
        return PlainTextResponse(DEV_STATUS_TEXT)

    async def api_not_found(request: Request):
        return not_found("API endpoint not found")

    async def redirect(request: Request) -> Response:
        if request.method not in ("GET", "HEAD"):
            return not_found("Not found")
        return RedirectResponse(f"{redirect_origin}{original_url(request)}", 302)

    return [
        Route("/", status, methods=["GET"]),
        Route("/api/{path:path}", api_not_found, methods=ALL_METHODS),
        Route("/{path:path}", redirect, methods=ALL_METHODS),
    ]


def fallback_routes(config: ServerConfig) -> list[BaseRoute]:
    if config.is_production:
        return production_routes(config.frontend_build_dir)
    return development_routes(config.dev_redirect_origin)
