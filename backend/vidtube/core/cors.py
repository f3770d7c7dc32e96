"""Cross-origin access to the API for the VidTube web client."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

# Headers the browser client sends and may read back
ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-Request-ID"]
EXPOSED_HEADERS = ["X-Request-ID", "Retry-After"]


def parse_origins(raw: str | None) -> list[str]:
    """Split a comma-separated ``CORS_ORIGINS`` value; blanks are dropped."""
    return [o.strip() for o in (raw or "").split(",") if o.strip()]


def init_app(app: Flask) -> None:
    """Enable CORS on ``/api/*``.

    The ``accessToken``/``refreshToken`` cookies only travel cross-origin to
    an explicit origin list. A blank ``CORS_ORIGINS`` or ``"*"`` opens the
    API to any origin without credentials.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    wildcard = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        allow_headers=ALLOWED_HEADERS,
        expose_headers=EXPOSED_HEADERS,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
