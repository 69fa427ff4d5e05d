"""Error types and helpers for consistent JSON error responses."""

from __future__ import annotations

from .orjson_response import ORJSONResponse
from .origin_policy import BLOCKED_MESSAGE


class ApiError(Exception):
    """Error carrying the status code and message shown to the client."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class CORSPolicyError(ApiError):
    status_code = 403

    def __init__(self, origin: str | None, message: str = BLOCKED_MESSAGE) -> None:
        super().__init__(message)
        self.origin = origin


class MalformedBodyError(ApiError):
    status_code = 400


class PayloadTooLargeError(ApiError):
    status_code = 413


class RouteConfigError(Exception):
    """The route table is misconfigured; raised at startup."""


class DuplicatePrefixError(RouteConfigError):
    pass


class ShadowedPrefixError(RouteConfigError):
    pass


def error_response(message: str, status_code: int) -> ORJSONResponse:
    return ORJSONResponse(
        {"success": False, "error": message}, status_code=status_code
    )


def not_found(message: str = "API endpoint not found") -> ORJSONResponse:
    return error_response(message, 404)


def internal_error(message: str = "Internal server error") -> ORJSONResponse:
    return error_response(message, 500)


def unavailable(message: str = "service unavailable") -> ORJSONResponse:
    return error_response(message, 503)
