"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset(
    {"CHANGE_ME", "CHANGE_ME_JWT", "CHANGE_ME_JWT_REFRESH"}
)

SESSION_STORE_BACKENDS: Final[frozenset[str]] = frozenset({"database", "redis"})

# Loads .env in development (no-op when absent)
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


def env_seconds(name: str, default: int) -> timedelta:
    """Read a duration expressed in seconds and return it as ``timedelta``.

    Blank or non-numeric values fall back to ``default``.
    """
    raw = os.getenv(name, "").strip()
    try:
        seconds = int(raw) if raw else default
    except ValueError:
        seconds = default
    return timedelta(seconds=max(1, seconds))


def env_float(name: str, default: float) -> float:
    """Read a positive float from the environment, falling back to ``default``."""
    raw = os.getenv(name, "").strip()
    try:
        value = float(raw) if raw else default
    except ValueError:
        value = default
    return value if value > 0 else default


def engine_options_for(database_uri: str, timeout_seconds: float) -> dict[str, Any]:
    """Return SQLAlchemy engine options bounding how long a store call may block.

    Only network databases get pool and connect timeouts; SQLite URLs (used in
    development and tests) keep the driver defaults.
    """
    if not database_uri.startswith("postgresql"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_timeout": timeout_seconds,
        "connect_args": {"connect_timeout": max(1, int(timeout_seconds))},
    }


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        Key signing access tokens.
    JWT_REFRESH_SECRET_KEY: str
        Separate key signing refresh tokens.
    JWT_ALGORITHM: str
        HMAC algorithm shared by both token kinds.
    JWT_ACCESS_TOKEN_EXPIRES / JWT_REFRESH_TOKEN_EXPIRES: timedelta
        Fixed lifetimes, read from ``*_SECONDS`` environment variables.
    JWT_ISSUER: str | None
        Optional ``iss`` claim embedded and verified on every token.
    PASSWORD_HASH_METHOD: str | None
        werkzeug hash method spec; ``None`` keeps the werkzeug default.
    SESSION_STORE_BACKEND: str
        ``"database"`` keeps the current refresh token on the ``users`` row,
        ``"redis"`` keeps it under a per-principal Redis key.
    REDIS_URL: str | None
        Connection URL used when the Redis backend is selected.
    STORE_TIMEOUT_SECONDS: float
        Upper bound for a single session store round-trip.
    AUTH_COOKIE_SECURE / AUTH_COOKIE_SAMESITE:
        Attributes of the ``accessToken`` / ``refreshToken`` cookies.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"
    APP_ENV = os.getenv(ENV_VAR, "development").strip().lower()

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_REFRESH_SECRET_KEY = os.getenv("JWT_REFRESH_SECRET_KEY", "CHANGE_ME_JWT_REFRESH")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ACCESS_TOKEN_EXPIRES = env_seconds("JWT_ACCESS_TOKEN_EXPIRES_SECONDS", 15 * 60)
    JWT_REFRESH_TOKEN_EXPIRES = env_seconds("JWT_REFRESH_TOKEN_EXPIRES_SECONDS", 10 * 24 * 3600)
    JWT_ISSUER = os.getenv("JWT_ISSUER") or None
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD") or None

    # Session store
    SESSION_STORE_BACKEND = os.getenv("SESSION_STORE_BACKEND", "database").strip().lower()
    REDIS_URL = os.getenv("REDIS_URL") or None
    STORE_TIMEOUT_SECONDS = env_float("STORE_TIMEOUT_SECONDS", 2.0)

    # Transport cookies
    AUTH_COOKIE_SECURE = env_bool("AUTH_COOKIE_SECURE", True)
    AUTH_COOKIE_SAMESITE = os.getenv("AUTH_COOKIE_SAMESITE", "Lax")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_ENGINE_OPTIONS = engine_options_for(SQLALCHEMY_DATABASE_URI, STORE_TIMEOUT_SECONDS)
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Reverse proxy
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXYFIX_HOPS = int(os.getenv("PROXYFIX_HOPS", "1"))

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and allows the auth cookies over plain HTTP
    unless ``AUTH_COOKIE_SECURE`` says otherwise.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    AUTH_COOKIE_SECURE = env_bool("AUTH_COOKIE_SECURE", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and the database session store.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {}
    SESSION_STORE_BACKEND = "database"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    REDIS_URL = None
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. :func:`validate_config` refuses to
    boot with placeholder secrets.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    AUTH_COOKIE_SECURE = True


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: Mapping[str, Any]) -> None:
    """Fail fast on settings the session layer cannot run with.

    :param config: Loaded Flask configuration mapping.
    :raises RuntimeError: On an unknown store backend, a Redis backend without
        ``REDIS_URL``, identical access/refresh secrets, or placeholder secrets
        outside debug/testing.
    """
    backend = str(config.get("SESSION_STORE_BACKEND", "database")).lower()
    if backend not in SESSION_STORE_BACKENDS:
        raise RuntimeError(f"Unknown SESSION_STORE_BACKEND {backend!r}")
    if backend == "redis" and not config.get("REDIS_URL"):
        raise RuntimeError("SESSION_STORE_BACKEND=redis requires REDIS_URL")
    if config.get("JWT_SECRET_KEY") == config.get("JWT_REFRESH_SECRET_KEY"):
        raise RuntimeError("JWT_SECRET_KEY and JWT_REFRESH_SECRET_KEY must differ")

    if config.get("DEBUG") or config.get("TESTING"):
        return
    for key in ("SECRET_KEY", "JWT_SECRET_KEY", "JWT_REFRESH_SECRET_KEY"):
        if config.get(key) in PLACEHOLDER_SECRETS:
            raise RuntimeError(f"{key} must be set in production")
