"""Eager JSON and form body parsing."""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qsl

import orjson
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .errors import MalformedBodyError, PayloadTooLargeError

JSON_TYPES = ("application/json",)
FORM_TYPES = ("application/x-www-form-urlencoded",)


def _media_type(request: Request) -> str:
    value = request.headers.get("content-type", "")
    return value.split(";", 1)[0].strip().lower()


def parse_form(body: bytes) -> dict[str, Any]:
    """Parse an urlencoded body; repeated keys collect into a list."""
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedBodyError("Malformed request body") from exc
    data: dict[str, Any] = {}
    for key, value in parse_qsl(text, keep_blank_values=True):
        if key in data:
            current = data[key]
            if isinstance(current, list):
                current.append(value)
            else:
                data[key] = [current, value]
        else:
            data[key] = value
    return data


def parse_json(body: bytes) -> Any:
    try:
        return orjson.loads(body)
    except orjson.JSONDecodeError as exc:
        raise MalformedBodyError("Malformed request body") from exc


def payload(request: Request) -> Any:
    """Return the body parsed for ``request``, or ``None``."""
    return getattr(request.state, "payload", None)


def replay(body: bytes, receive: Receive) -> Receive:
    """A ``receive`` that yields ``body`` once, then defers to ``receive``."""
    sent = False

    async def wrapped() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return wrapped


class BodyParsingMiddleware:
    """Parse request bodies into ``request.state.payload`` before routing.

    The body is read chunk by chunk and the request fails with 413 as soon as
    it passes ``max_request_bytes``, whether or not ``Content-Length`` was
    sent.  Downstream handlers can still read the raw body.
    """

    def __init__(self, app: ASGIApp, max_request_bytes: int) -> None:
        self.app = app
        self.max_request_bytes = max_request_bytes

    async def read_limited(self, request: Request) -> bytes:
        chunks: list[bytes] = []
        size = 0
        async for chunk in request.stream():
            size += len(chunk)
            if size > self.max_request_bytes:
                raise PayloadTooLargeError("request entity too large")
            chunks.append(chunk)
        return b"".join(chunks)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        request.state.payload = None
        media_type = _media_type(request)
        if media_type not in JSON_TYPES and media_type not in FORM_TYPES:
            await self.app(scope, receive, send)
            return

        length = request.headers.get("content-length")
        if length:
            try:
                declared = int(length)
            except ValueError:
                raise MalformedBodyError("invalid Content-Length header") from None
            if declared > self.max_request_bytes:
                raise PayloadTooLargeError("request entity too large")

        body = await self.read_limited(request)
        if body:
            if media_type in JSON_TYPES:
                request.state.payload = parse_json(body)
            else:
                request.state.payload = parse_form(body)
        else:
            request.state.payload = {}
        await self.app(scope, replay(body, receive), send)
