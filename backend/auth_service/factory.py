"""Application factory for the auth service."""

from __future__ import annotations

import logging

from flask import Flask

from auth_service.core.config import CONFIG_MAP, BaseConfig, get_config, validate_config
from auth_service.core.logger import configure_logging, init_app as init_logging

log = logging.getLogger(__name__)


def _resolve_config(config: str | type[BaseConfig] | object | None) -> str | type | object:
    # Environment names ("testing") win over dotted import paths
    if config is None:
        return get_config()
    if isinstance(config, str) and config.lower() in CONFIG_MAP:
        return CONFIG_MAP[config.lower()]
    return config


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """
    Build the Flask app serving ``/api/v1/auth`` and ``/api/v1/users``.

    :param config: Environment name, config class/object, or import path.
        Defaults to the class selected by ``APP_ENV``.
    :param instance_relative_config: Load ``instance/<instance_config_filename>``
        on top of ``config`` when present.
    :raises RuntimeError: If the configuration fails :func:`validate_config`.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(_resolve_config(config))
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    validate_config(app.config)
    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from auth_service.core import extensions

    extensions.init_app(app)
    init_logging(app)

    from auth_service.api import init_app as init_api

    init_api(app)

    from auth_service.core import errors

    errors.init_app(app)

    from auth_service import cli as app_cli

    app_cli.init_app(app)

    @app.shell_context_processor
    def _shell_context() -> dict[str, object]:
        from auth_service import models
        from auth_service.api.deps import build_auth_service

        return {
            "db": extensions.db,
            "UserAccount": models.UserAccount,
            "build_auth_service": build_auth_service,
        }

    log.info(
        "app.created",
        extra={"event": "app.created", "outcome": app.config["REFRESH_TOKEN_BACKEND"]},
    )
    return app
