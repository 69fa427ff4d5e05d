"""Static file lookup confined to a directory, and the ``/uploads`` stage."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import FileResponse, Response

from .errors import not_found

logger = logging.getLogger(__name__)

UPLOADS_PREFIX = "/uploads"


def _candidate(root: Path, relative: str) -> tuple[str, str]:
    base = os.path.realpath(root)
    return base, os.path.realpath(os.path.join(base, relative.lstrip("/")))


def escapes(root: Path, relative: str) -> bool:
    """Whether ``relative`` points outside ``root`` once resolved."""
    if "\x00" in relative:
        return True
    base, candidate = _candidate(root, relative)
    try:
        return os.path.commonpath([base, candidate]) != base
    except ValueError:
        return True


def resolve_within(root: Path, relative: str) -> Optional[Path]:
    """Return the file ``relative`` names inside ``root``.

    ``None`` is returned when the path escapes ``root`` (``..`` segments,
    absolute paths, symlinks pointing elsewhere) or does not name a regular
    file.
    """

    if escapes(root, relative):
        return None
    _, candidate = _candidate(root, relative)
    if not os.path.isfile(candidate):
        return None
    return Path(candidate)


class UploadsMiddleware(BaseHTTPMiddleware):
    """Serve files under ``/uploads`` from the uploads directory."""

    def __init__(self, app, directory: Path, prefix: str = UPLOADS_PREFIX) -> None:
        super().__init__(app)
        self.directory = directory
        self.prefix = prefix.rstrip("/")

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        path = request.url.path
        if request.method not in ("GET", "HEAD") or not path.startswith(
            self.prefix + "/"
        ):
            return await call_next(request)

        relative = path[len(self.prefix) + 1 :]
        if escapes(self.directory, relative):
            logger.warning("upload_path_rejected", extra={"path": path})
            return not_found("File not found")
        file_path = resolve_within(self.directory, relative)
        if file_path is None:
            return await call_next(request)
        return FileResponse(file_path)
