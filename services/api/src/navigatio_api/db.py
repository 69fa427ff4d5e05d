"""MongoDB connection bootstrap for the API service.

The connection is established once, after the HTTP listener is already
accepting requests.  Failure to connect is fatal: the error is logged and the
process exits with status 1 so the process manager can restart it.  There is
no retry loop here.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Optional

from pymongo import AsyncMongoClient

logger = logging.getLogger(__name__)

_client: Optional[Any] = None


def _hard_exit(code: int) -> None:
    """Terminate immediately, without unwinding the event loop."""
    logging.shutdown()
    os._exit(code)


async def connect_db(
    uri: str,
    *,
    client_factory: Callable[[str], Any] = AsyncMongoClient,
    exit_process: Callable[[int], None] = _hard_exit,
) -> None:
    """Connect to MongoDB at ``uri`` or terminate the process."""

    global _client
    client = None
    try:
        if not uri:
            raise ValueError("MONGODB_URI is not set")
        client = client_factory(uri)
        # Clients connect lazily; force a round trip so failures surface now.
        await client.admin.command("ping")
    except Exception as exc:
        logger.error("mongodb_connection_error", exc_info=exc)
        if client is not None:
            try:
                await client.close()
            except Exception:  # pragma: no cover - best effort on the way out
                logger.debug("mongodb_close_failed", exc_info=True)
        exit_process(1)
        return
    _client = client
    logger.info("mongodb_connected")


def get_client() -> Optional[Any]:
    """Return the connected client, or ``None`` before the bootstrap ends."""
    return _client


async def ping() -> bool:
    """Check database connectivity."""
    client = get_client()
    if client is None:
        return False
    try:
        await client.admin.command("ping")
        return True
    except Exception:  # pragma: no cover - network errors
        return False


async def close_client() -> None:
    """Close the global client and its pooled connections."""
    global _client
    client, _client = _client, None
    if client is None:
        return
    await client.close()
    logger.info("mongodb_closed")
