"""Logging setup shared by the API process and its tests."""

from __future__ import annotations

import logging
import os
import sys
import threading
from typing import Any, Dict

import orjson

from .log_sanitize import LogSanitizerFilter

# Cache the standard LogRecord fields once so that formatters can
# efficiently filter out extra attributes on each log call.
_DEFAULT_LOG_FIELDS = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__)
_DEFAULT_LOG_FIELDS.add("message")


def _extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: v for k, v in record.__dict__.items() if k not in _DEFAULT_LOG_FIELDS
    }


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extras(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str).decode()


class PlainFormatter(logging.Formatter):
    """Plain formatter that appends extra fields."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        base = super().format(record)
        extras = [f"{k}={v}" for k, v in _extras(record).items()]
        if extras:
            if record.exc_info:
                first, *rest = base.splitlines()
                base = " ".join([first, " ".join(extras)])
                if rest:
                    base += "\n" + "\n".join(rest)
            else:
                base = " ".join([base, " ".join(extras)])
        return base


_LOG_LOCK = threading.Lock()


def setup_logging() -> None:
    root = logging.getLogger()
    if getattr(root, "_navigatio_logging_configured", False):
        return
    with _LOG_LOCK:
        if getattr(root, "_navigatio_logging_configured", False):
            return

        handler = logging.StreamHandler(sys.stdout)
        log_format = os.getenv("LOG_FORMAT", "plain")
        if log_format.lower() == "json":
            handler.setFormatter(JsonFormatter())
        else:
            handler.setFormatter(
                PlainFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
            )
        handler.addFilter(LogSanitizerFilter())

        root.handlers.clear()
        root.addHandler(handler)
        level = os.getenv("LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level, logging.INFO))

        # Quiet overly chatty third-party libraries so logs stay readable.
        for name in ("pymongo", "httpx"):
            logging.getLogger(name).setLevel(logging.WARNING)

        # Forward uvicorn's logs through the same handler without propagating.
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            uv = logging.getLogger(name)
            uv.handlers.clear()
            uv.propagate = False
            uv.addHandler(handler)

        root._navigatio_logging_configured = True
