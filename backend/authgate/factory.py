"""Build the authgate Flask application and its process-wide collaborators."""

from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask

from authgate.api.deps import (
    ASSETS_EXTENSION,
    AVATAR_FETCHER_EXTENSION,
    COORDINATOR_EXTENSION,
    ISSUER_EXTENSION,
    PROVIDER_EXTENSION,
)
from authgate.core.config import BaseConfig, get_config
from authgate.core.logger import configure_logging, init_app as init_logging
from authgate.infra.google import GoogleIdentityProvider
from authgate.infra.http import RequestsAvatarFetcher
from authgate.infra.jwt import JWTTokenIssuer
from authgate.infra.jwt.callbacks import DENYLIST_EXTENSION
from authgate.infra.redis import RedisTokenDenylistStore
from authgate.infra.storage import LocalAssetStore
from authgate.services._shared.ports import (
    AssetStoreRouter,
    InMemoryDenylistStore,
    TokenDenylistStore,
)
from authgate.services.tokens import RoleTtlConfig, RoleTtlPolicy, TokenIssuanceCoordinator

log = logging.getLogger(__name__)

DEFAULT_RETENTION_MINUTES = 60 * 24 * 30


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
) -> Flask:
    """
    Build the auth service.

    Configuration comes from ``config`` (or ``APP_ENV``) and an optional
    ``instance/config.py``. Token collaborators are created here once, so
    every request shares one issuer and one coordinator lock.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)
    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config:
        app.config.from_pyfile("config.py", silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from authgate.core import cors, errors, extensions, proxy

    proxy.init_app(app)
    extensions.init_app(app)
    init_logging(app)

    wire_services(app)

    cors.init_app(app)

    from authgate.api import init_app as init_api

    init_api(app)
    errors.init_app(app)

    from authgate import cli as app_cli

    app_cli.init_app(app)

    log.info(
        "authgate ready: default token TTL %s min, role overrides %s, denylist %s",
        app.config["JWT_TTL_MINUTES"],
        sorted(app.config.get("JWT_ROLE_TTLS") or {}),
        type(app.extensions[DENYLIST_EXTENSION]).__name__,
    )
    return app


# ------------------------------ service wiring ------------------------------


def wire_services(app: Flask) -> None:
    """
    Put the token, storage and federation collaborators in ``app.extensions``.

    The routes and the CLI look them up by key; tests swap entries to plug
    in stubs.
    """
    cfg = app.config
    cfg["JWT_TTL_MINUTES"] = int(cfg.get("JWT_TTL_MINUTES") or 60)
    cfg.setdefault("JWT_ACCESS_TOKEN_EXPIRES", timedelta(minutes=cfg["JWT_TTL_MINUTES"]))

    denylist = _build_denylist(app)
    issuer = JWTTokenIssuer(
        denylist=denylist,
        default_ttl_minutes=cfg["JWT_TTL_MINUTES"],
        retention_minutes=int(cfg.get("DENYLIST_RETENTION_MINUTES") or DEFAULT_RETENTION_MINUTES),
    )
    policy = RoleTtlPolicy(RoleTtlConfig.from_config(cfg))

    app.extensions[DENYLIST_EXTENSION] = denylist
    app.extensions[ISSUER_EXTENSION] = issuer
    app.extensions[COORDINATOR_EXTENSION] = TokenIssuanceCoordinator(issuer, policy)
    app.extensions[ASSETS_EXTENSION] = _build_asset_stores(cfg)
    app.extensions[PROVIDER_EXTENSION] = GoogleIdentityProvider(
        client_id=cfg.get("GOOGLE_CLIENT_ID"),
        client_secret=cfg.get("GOOGLE_CLIENT_SECRET"),
        redirect_uri=cfg.get("GOOGLE_REDIRECT_URI"),
        timeout=cfg.get("OAUTH_HTTP_TIMEOUT") or 10,
    )
    app.extensions[AVATAR_FETCHER_EXTENSION] = RequestsAvatarFetcher(
        timeout=cfg.get("AVATAR_FETCH_TIMEOUT") or 10
    )


def _build_denylist(app: Flask) -> TokenDenylistStore:
    client = app.extensions.get("redis_client")
    if client is not None:
        return RedisTokenDenylistStore(client)
    return InMemoryDenylistStore()


def _build_asset_stores(cfg) -> AssetStoreRouter:
    # New avatars go to the primary disk when one is configured.
    primary_root = cfg.get("ASSET_PRIMARY_ROOT")
    return AssetStoreRouter(
        public=LocalAssetStore(cfg.get("ASSET_PUBLIC_ROOT", "./storage/public"), name="public"),
        primary=LocalAssetStore(primary_root, name="primary") if primary_root else None,
    )
