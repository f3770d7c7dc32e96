"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from vidtube.api.deps import json_response, timing
from vidtube.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report database reachability and the active session store."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    payload = {
        "status": "ok" if db_status == "ok" else "degraded",
        "db": db_status,
        "session_store": current_app.extensions["refresh_token_store"].backend,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if db_status == "ok" else 503)
