"""Route table mapping URL prefixes to mounted handlers.

The table is built once at startup and never changes afterwards.  Each
prefix owns every path beneath it; the first entry whose prefix matches a
request wins.  :meth:`RouteTable.build` refuses tables where that rule would
hide a route: a repeated prefix, or a prefix registered after a shorter one
that already captures it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from starlette.requests import Request
from starlette.routing import BaseRoute, Mount, Route
from starlette.types import ASGIApp, Receive, Scope, Send

from .errors import DuplicatePrefixError, ShadowedPrefixError, unavailable
from .orjson_response import ORJSONResponse

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

LIVENESS_PREFIX = "/api"
LIVENESS_PAYLOAD = {"message": "API is working!"}

# (prefix, collaborator name), in registration order.
API_ROUTES: tuple[tuple[str, str], ...] = (
    ("/api/v1/itinerary-creator", "itinerary_creator"),
    ("/api/auth", "auth"),
    ("/api/users", "users"),
    ("/api/quotes", "quotes"),
    ("/api/leads", "leads"),
    ("/api/bookings", "bookings"),
    ("/api/packages", "packages"),
    ("/api/itineraries", "itineraries"),
    ("/api/booking-status", "booking_status"),
    ("/api/claims", "claims"),
    ("/api/sellers", "sellers"),
    ("/api/suppliers", "suppliers"),
    ("/api/sightseeing", "sightseeing"),
    ("/api/notifications", "notifications"),
    ("/api/guest-sightseeing", "guest_sightseeing"),
    ("/api/guest-sightseeing-test", "guest_sightseeing_test"),
    ("/api/sales-leads", "sales_leads"),
    ("/api/stats", "stats"),
    ("/api/wallets", "wallets"),
    ("/api/lms", "lms"),
    ("/api/ai", "ai"),
    ("/api/test", "diagnostics"),
)


async def liveness(request: Request) -> ORJSONResponse:
    """Fixed payload confirming the API answers."""
    return ORJSONResponse(LIVENESS_PAYLOAD)


class PrefixRoot:
    """Hand a request for the bare prefix to the mounted app as its ``/``."""

    def __init__(self, prefix: str, app: ASGIApp) -> None:
        self.prefix = prefix
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        scope = dict(scope)
        scope["path"] = scope["path"] + "/"
        scope["root_path"] = scope.get("root_path", "") + self.prefix
        await self.app(scope, receive, send)


class MissingCollaborator:
    """Stand-in mounted when a route module is not installed."""

    def __init__(self, name: str) -> None:
        self.name = name

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = unavailable(f"{self.name} module is not available")
        await response(scope, receive, send)


def _segments(prefix: str) -> tuple[str, ...]:
    return tuple(part for part in prefix.split("/") if part)


def _captures(outer: str, inner: str) -> bool:
    """Whether a mount on ``outer`` also matches every path under ``inner``."""
    outer_parts, inner_parts = _segments(outer), _segments(inner)
    return (
        len(outer_parts) < len(inner_parts)
        and inner_parts[: len(outer_parts)] == outer_parts
    )


@dataclass(frozen=True)
class RouteEntry:
    prefix: str
    name: str
    handler: ASGIApp
    exact: bool = False

    def to_routes(self) -> list[BaseRoute]:
        if self.exact:
            return [
                Route(self.prefix, self.handler, methods=ALL_METHODS, name=self.name)
            ]
        # A Mount only matches "prefix/..."; the bare prefix belongs to it too.
        return [
            Route(self.prefix, PrefixRoot(self.prefix, self.handler)),
            Mount(self.prefix, app=self.handler, name=self.name),
        ]


@dataclass(frozen=True)
class RouteTable:
    entries: tuple[RouteEntry, ...]

    @classmethod
    def build(cls, entries: Iterable[RouteEntry]) -> "RouteTable":
        seen: list[RouteEntry] = []
        for entry in entries:
            if not entry.prefix.startswith("/"):
                raise ValueError(f"route prefix must start with '/': {entry.prefix!r}")
            for earlier in seen:
                if earlier.prefix == entry.prefix:
                    raise DuplicatePrefixError(
                        f"prefix {entry.prefix} registered twice "
                        f"({earlier.name} and {entry.name})"
                    )
                if not earlier.exact and _captures(earlier.prefix, entry.prefix):
                    raise ShadowedPrefixError(
                        f"prefix {entry.prefix} ({entry.name}) is unreachable "
                        f"behind {earlier.prefix} ({earlier.name})"
                    )
            seen.append(entry)
        return cls(tuple(seen))

    def prefixes(self) -> tuple[str, ...]:
        return tuple(entry.prefix for entry in self.entries)

    def routes(self) -> list[BaseRoute]:
        return [route for entry in self.entries for route in entry.to_routes()]

    def __len__(self) -> int:
        return len(self.entries)


def api_route_table(
    collaborators: Optional[Mapping[str, ASGIApp]] = None,
) -> RouteTable:
    """Build the canonical API table from the installed collaborators."""
    collaborators = collaborators or {}
    entries = []
    for prefix, name in API_ROUTES:
        handler = collaborators.get(name)
        if handler is None:
            logger.warning(
                "collaborator_missing", extra={"collaborator": name, "prefix": prefix}
            )
            handler = MissingCollaborator(name)
        entries.append(RouteEntry(prefix, name, handler))
    entries.append(RouteEntry(LIVENESS_PREFIX, "liveness", liveness, exact=True))
    return RouteTable.build(entries)
