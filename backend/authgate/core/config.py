"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'


# Load .env during development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int | None) -> int | None:
    """Parse an integer from an environment variable.

    Blank or non-numeric values fall back to ``default``.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val.strip())
    except ValueError:
        return default


def parse_role_ttls(raw: str | None) -> dict[str, str]:
    """Parse ``"admin:never,clerk:480"`` into a role → override mapping.

    Values are kept as raw strings; interpretation belongs to the TTL policy,
    which silently ignores anything it cannot use.

    :param raw: Comma-separated ``role:value`` pairs.
    :type raw: str | None
    :returns: Mapping of role name to raw override.
    :rtype: dict[str, str]
    """
    overrides: dict[str, str] = {}
    for chunk in (raw or "").split(","):
        role, sep, value = chunk.partition(":")
        if not sep or not role.strip():
            continue
        overrides[role.strip()] = value.strip()
    return overrides


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        Key used by ``flask-jwt-extended`` for signing bearer tokens.
    JWT_TTL_MINUTES: int
        Default token lifetime when a role has no usable override.
    JWT_NEVER_EXPIRE_TTL_MINUTES: int | None
        TTL reported for roles configured as ``never``; ``None`` reuses
        ``JWT_TTL_MINUTES``.
    JWT_ROLE_TTLS: dict[str, str]
        Role overrides, either a positive number of minutes or ``never``.
    DENYLIST_RETENTION_MINUTES: int
        How long revoked never-expiring tokens stay on the denylist.
    REDIS_URL: str | None
        Redis connection string for the token denylist. In-process store
        when unset.
    ASSET_PUBLIC_ROOT: str
        Filesystem root of the public asset disk.
    ASSET_PRIMARY_ROOT: str | None
        Root of the primary (bucket-mounted) asset disk; optional.
    GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET / GOOGLE_REDIRECT_URI: str | None
        OAuth client registration for Google federation.
    FRONTEND_URL: str
        Base URL the federated callback redirects the browser to.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")

    # Token lifetimes
    JWT_TTL_MINUTES = env_int("JWT_TTL", 60) or 60
    JWT_NEVER_EXPIRE_TTL_MINUTES = env_int("JWT_NEVER_EXPIRE_TTL", None)
    JWT_ROLE_TTLS = parse_role_ttls(os.getenv("JWT_ROLE_TTLS"))
    DENYLIST_RETENTION_MINUTES = env_int("DENYLIST_RETENTION_MINUTES", 60 * 24 * 30)
    REDIS_URL = os.getenv("REDIS_URL")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Profile image storage
    ASSET_PUBLIC_ROOT = os.getenv("ASSET_PUBLIC_ROOT", "./storage/public")
    ASSET_PRIMARY_ROOT = os.getenv("ASSET_PRIMARY_ROOT")
    AVATAR_FETCH_TIMEOUT = env_int("AVATAR_FETCH_TIMEOUT", 10)

    # Google federation
    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
    GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
    GOOGLE_REDIRECT_URI = os.getenv("GOOGLE_CALLBACK_REDIRECTS") or os.getenv("GOOGLE_REDIRECT")
    OAUTH_HTTP_TIMEOUT = env_int("OAUTH_HTTP_TIMEOUT", 10)
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:8080")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:8080")
    CORS_MAX_AGE = 86400

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Never talks to Redis; the denylist lives in process.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REDIS_URL = None
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
