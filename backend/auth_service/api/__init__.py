"""HTTP surface of the auth service."""

from __future__ import annotations

import logging

from flask import Flask

log = logging.getLogger(__name__)


def mount_version(app: Flask, base_prefix: str, version: str) -> list[str]:
    """Register one API version's blueprints under ``<base_prefix>/<version>``.

    Parameters
    ----------
    app:
        Application receiving the blueprints.
    base_prefix:
        Root path, ``API_BASE_PREFIX`` (``"/api"`` by default).
    version:
        Version segment; its package must expose ``registry()``.

    Returns
    -------
    list[str]
        The URL prefixes that were mounted.
    """
    from importlib import import_module

    module = import_module(f"{__name__}.{version}")
    root = f"/{base_prefix.strip('/')}/{version}"
    mounted: list[str] = []
    for bp, rel_prefix in module.registry():
        url_prefix = root + (f"/{rel_prefix.strip('/')}" if rel_prefix.strip("/") else "")
        app.register_blueprint(bp, url_prefix=url_prefix)
        mounted.append(url_prefix)
    log.debug("api.mounted", extra={"event": "api.mounted", "outcome": ",".join(mounted)})
    return mounted


def init_app(app: Flask) -> None:
    """Mount every supported API version."""

    from auth_service.api.v1 import API_VERSION

    mount_version(app, app.config.get("API_BASE_PREFIX", "/api"), API_VERSION)


__all__ = ["init_app", "mount_version"]
