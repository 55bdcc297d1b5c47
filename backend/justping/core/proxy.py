"""Reverse-proxy awareness for deployments behind a load balancer."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`ProxyFix` when ``USE_PROXYFIX`` is set.

    ``PROXYFIX_HOPS`` (default ``1``) is the number of trusted proxies in front
    of the service; it is used for ``X-Forwarded-For`` so the rate limiter
    keys on the real client address.
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXYFIX_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=1, x_host=1)
