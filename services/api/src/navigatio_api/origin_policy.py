"""Cross-origin request policy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config import Environment

DEFAULT_ALLOWED_ORIGINS: tuple[str, ...] = (
    "https://navigatio-b6a2ebbvfygxazeq.centralindia-01.azurewebsites.net",
    "https://navigatio-b6a2ebbvfygxazeq.scm.azurewebsites.net",
    "https://navigatioasia.com",
    "http://navigatioasia.com",
    "http://localhost:3000",
    "http://localhost:5000",
)
PLATFORM_SUFFIX = ".azurewebsites.net"
CUSTOM_DOMAIN_SUFFIX = "navigatioasia.com"

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH")
ALLOWED_HEADERS = (
    "Content-Type",
    "Authorization",
    "X-Requested-With",
    "Accept",
    "Origin",
)
EXPOSED_HEADERS = ("Content-Length", "Content-Type", "Authorization")

BLOCKED_MESSAGE = (
    "The CORS policy for this site does not allow access from the specified Origin."
)


@dataclass(frozen=True)
class OriginPolicy:
    """Exact origins plus suffix rules for whole domains."""

    origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    suffixes: tuple[str, ...] = (PLATFORM_SUFFIX, CUSTOM_DOMAIN_SUFFIX)

    def matches(self, origin: str) -> bool:
        return origin in self.origins or origin.endswith(self.suffixes)

    def with_origins(self, extra: Iterable[str]) -> "OriginPolicy":
        merged = list(self.origins)
        merged.extend(o for o in extra if o not in merged)
        return OriginPolicy(origins=tuple(merged), suffixes=self.suffixes)


def default_origin_policy() -> OriginPolicy:
    return OriginPolicy()


def is_allowed(
    origin: Optional[str],
    environment: "Environment",
    policy: Optional[OriginPolicy] = None,
) -> bool:
    """Return ``True`` when a request from ``origin`` may proceed.

    Development accepts every origin.  Requests without an ``Origin`` header
    (curl, mobile apps, server-to-server calls) are always accepted.
    """

    if environment != "production":
        return True
    if not origin:
        return True
    return (policy or default_origin_policy()).matches(origin)
