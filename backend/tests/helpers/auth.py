"""Authentication helpers for tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from flask import Flask

from vidtube.infra.jwt.jwt_token_codec import JWTTokenCodec


def issue_token(app: Flask, principal_id: int, *, at: datetime | None = None) -> str:
    """Sign an access token for ``principal_id`` with the app's settings.

    Parameters
    ----------
    app:
        Application whose ``token_settings`` extension provides the keys.
    principal_id:
        Subject identifier to encode in the token.
    at:
        Issue instant; defaults to now.
    """
    issued = at or datetime.now(UTC)
    codec = JWTTokenCodec(app.extensions["token_settings"], clock=lambda: issued)
    return codec.issue_access_token(principal_id)


def expired_token(app: Flask, principal_id: int) -> str:
    """Return an access token whose expiry already passed."""
    settings = app.extensions["token_settings"]
    return issue_token(
        app, principal_id, at=datetime.now(UTC) - settings.access_expires - timedelta(seconds=5)
    )


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
