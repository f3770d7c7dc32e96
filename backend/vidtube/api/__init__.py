"""API blueprint package aggregating versioned endpoints."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Register related blueprints beneath a common prefix.

    Parameters
    ----------
    app:
        Application instance receiving the blueprints.
    base_prefix:
        Version prefix such as ``"/api/v1"``.
    entries:
        ``(blueprint, relative_prefix)`` pairs; an empty relative prefix mounts
        the blueprint at the version root.
    """

    for bp, rel_prefix in entries:
        segments = [base_prefix.strip("/"), rel_prefix.strip("/")]
        app.register_blueprint(bp, url_prefix="/" + "/".join(s for s in segments if s))


def init_app(app: Flask) -> None:
    """Register the available API versions on the Flask app."""

    api_base = app.config.get("API_BASE_PREFIX", "/api")

    from vidtube.api.v1 import API_VERSION as V1
    from vidtube.api.v1 import REGISTRY as V1_REGISTRY

    register_blueprint_group(app, base_prefix=f"{api_base}/{V1}", entries=V1_REGISTRY)

    from vidtube.core.errors import APIError, render_api_error
    from vidtube.services._shared.base import BaseService
    from vidtube.services._shared.errors import ServiceError

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        translated = BaseService.translate_exceptions(err)
        if not isinstance(translated, APIError):  # pragma: no cover - every ServiceError maps
            raise err
        return render_api_error(translated)


__all__ = ["init_app", "register_blueprint_group"]
