"""Process entry point: listener first, then the database."""

from __future__ import annotations

import asyncio
import logging
from importlib.metadata import entry_points
from typing import Any, Awaitable, Callable, Optional

import uvicorn
from dotenv import load_dotenv
from starlette.types import ASGIApp

from .config import ServerConfig
from .db import connect_db
from .logging import setup_logging
from .main import create_app

logger = logging.getLogger(__name__)

COLLABORATOR_GROUP = "navigatio_api.routers"
STARTUP_POLL_SECONDS = 0.05


def discover_collaborators(group: str = COLLABORATOR_GROUP) -> dict[str, ASGIApp]:
    """Load route modules published under the ``group`` entry point group."""
    found: dict[str, ASGIApp] = {}
    for ep in entry_points(group=group):
        found[ep.name] = ep.load()
        logger.info("collaborator_loaded", extra={"collaborator": ep.name})
    return found


def build_server(config: ServerConfig, app: ASGIApp) -> uvicorn.Server:
    return uvicorn.Server(
        uvicorn.Config(
            app,
            host=config.host,
            port=config.port,
            loop="asyncio",
            log_config=None,
            access_log=False,
        )
    )


async def serve(
    config: ServerConfig,
    app: ASGIApp,
    *,
    server: Optional[Any] = None,
    connect: Callable[[str], Awaitable[None]] = connect_db,
) -> None:
    """Serve ``app`` and connect the database once the listener is up.

    Requests may arrive before the database is reachable; the bootstrap
    terminates the process if the connection fails.
    """

    server = server or build_server(config, app)
    serve_task = asyncio.create_task(server.serve())
    while not server.started:
        if serve_task.done():
            # Startup failed (port in use, lifespan error...).
            await serve_task
            return
        await asyncio.sleep(STARTUP_POLL_SECONDS)
    logger.info("server_listening", extra={"host": config.host, "port": config.port})
    await connect(config.mongodb_uri)
    await serve_task


def main() -> int:
    """Run the API service."""
    load_dotenv()
    setup_logging()
    config = ServerConfig.from_env()
    app = create_app(config, discover_collaborators())
    asyncio.run(serve(config, app))
    return 0
