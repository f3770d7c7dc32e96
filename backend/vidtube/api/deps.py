"""Shared API helpers: JSON envelopes, access-token guard, auth cookies."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from vidtube.core.errors import Unauthorized
from vidtube.core.sessions import get_token_codec
from vidtube.services._shared.ports import TokenKind

F = TypeVar("F", bound=Callable[..., Any])

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def envelope(data: Any, message: str, *, status: int = 200) -> Response:
    """Wrap ``data`` in the ``{"data", "message"}`` envelope."""

    return json_response({"data": data, "message": message}, status=status)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Access-token guard
# --------------------------------------------------------------------------- #


def _bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(ACCESS_COOKIE) or None


def require_auth(func: F) -> F:
    """
    Ensure the request carries a valid access token.

    The token is read from ``Authorization: Bearer`` first, then from the
    ``accessToken`` cookie. On success the principal id is stored on
    ``g.principal_id``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = _bearer_token()
        if not token:
            raise Unauthorized("Unauthorized request")
        # TokenInvalidError / TokenExpiredError render as 401 problems
        subject = get_token_codec().verify(token, TokenKind.ACCESS)
        try:
            g.principal_id = int(subject)
        except ValueError as exc:
            raise Unauthorized("Invalid access token", code="token_invalid") from exc
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_principal_id() -> int:
    """Principal id resolved by :func:`require_auth`."""

    principal_id = g.get("principal_id")
    if principal_id is None:
        raise Unauthorized("Unauthorized request")
    return int(principal_id)


# --------------------------------------------------------------------------- #
# Transport cookies
# --------------------------------------------------------------------------- #


def _cookie_options() -> dict[str, Any]:
    return {
        "httponly": True,
        "secure": bool(current_app.config.get("AUTH_COOKIE_SECURE", True)),
        "samesite": current_app.config.get("AUTH_COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }


def set_auth_cookies(response: Response, *, access_token: str, refresh_token: str) -> Response:
    settings = current_app.extensions["token_settings"]
    options = _cookie_options()
    response.set_cookie(
        ACCESS_COOKIE,
        access_token,
        max_age=int(settings.access_expires.total_seconds()),
        **options,
    )
    response.set_cookie(
        REFRESH_COOKIE,
        refresh_token,
        max_age=int(settings.refresh_expires.total_seconds()),
        **options,
    )
    return response


def clear_auth_cookies(response: Response) -> Response:
    options = _cookie_options()
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(name, **options)
    return response
