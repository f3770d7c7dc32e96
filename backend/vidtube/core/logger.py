"""JSON logging for the session service.

Every record carries the request correlation id and, on authenticated
requests, the ``principal_id`` resolved by ``require_auth``. Anything that
looks like a JWT is masked before a record is written.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_app_context, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")

# Structured ``extra=`` keys copied onto the JSON payload when present.
EXTRA_KEYS = ("endpoint", "elapsed_ms", "principal_id", "event", "store")

# header.payload.signature, base64url segments; JWT headers always start with "eyJ"
_JWT_RE = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]+")
REDACTED = "[redacted-token]"


def redact_tokens(text: str) -> str:
    """Mask JWT-shaped substrings in ``text``."""
    return _JWT_RE.sub(REDACTED, text)


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects with tokens masked."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": redact_tokens(record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }
        if record.exc_info:
            payload["exc_info"] = redact_tokens(self.formatException(record.exc_info))
        for key in EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        return json.dumps(payload, default=str)


class RequestContextFilter(logging.Filter):
    """Stamp ``request_id`` and, once authenticated, ``principal_id`` on records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        if not hasattr(record, "principal_id") and has_app_context():
            principal_id = g.get("principal_id")
            if principal_id is not None:
                record.principal_id = principal_id
        return True


def ensure_request_id() -> str:
    """Return the current request identifier, generating one when necessary."""

    if has_request_context():
        if hasattr(g, "request_id"):
            return g.request_id  # type: ignore[return-value]
        for header in CORRELATION_HEADERS:
            value = request.headers.get(header)
            if value:
                g.request_id = value
                return value
        request_id = str(uuid4())
        g.request_id = request_id
        return request_id
    return str(uuid4())


def configure_logging(level: str | int = "INFO") -> None:
    """Send the root logger to stdout as JSON."""

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    level_value: int | str = level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level_value = resolved if isinstance(resolved, int) else level.upper()
    root.setLevel(level_value)


def init_app(app: Flask) -> None:
    """Seed a request id per request and echo it back in ``X-Request-ID``."""

    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _inject_response_header(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = [
    "configure_logging",
    "init_app",
    "ensure_request_id",
    "redact_tokens",
    "JSONFormatter",
    "RequestContextFilter",
]
