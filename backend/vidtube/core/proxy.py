"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`~werkzeug.middleware.proxy_fix.ProxyFix`.

    ``USE_PROXYFIX`` (default ``True``) toggles the middleware and
    ``PROXYFIX_HOPS`` (default ``1``) sets how many upstream proxies are
    trusted. The ``secure`` attribute of the auth cookies relies on the
    forwarded scheme being honoured behind TLS-terminating proxies.
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXYFIX_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)
