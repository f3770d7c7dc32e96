"""Build the session components once per app and expose them via ``app.extensions``."""

from __future__ import annotations

import logging
from typing import cast

from flask import Flask, current_app

from vidtube.core.config import validate_config
from vidtube.core.security import CredentialVerifier
from vidtube.infra.jwt.jwt_token_codec import JWTTokenCodec
from vidtube.infra.sqlalchemy.sqlalchemy_principal_directory import SQLAlchemyPrincipalDirectory
from vidtube.infra.sqlalchemy.sqlalchemy_refresh_token_store import SQLAlchemyRefreshTokenStore
from vidtube.services._shared.ports import RefreshTokenStore
from vidtube.services.auth.dto import TokenSettings
from vidtube.services.auth.service import SessionTokenManager
from vidtube.services.identity.service import IdentityService

log = logging.getLogger(__name__)


def build_store(app: Flask, settings: TokenSettings) -> RefreshTokenStore:
    """Select the refresh-token store from ``SESSION_STORE_BACKEND``."""
    backend = str(app.config.get("SESSION_STORE_BACKEND", "database")).lower()
    if backend == "redis":
        from vidtube.core.extensions import get_redis
        from vidtube.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore

        return RedisRefreshTokenStore(get_redis(), ttl=settings.refresh_expires)
    return SQLAlchemyRefreshTokenStore()


def init_app(app: Flask) -> None:
    """
    Validate config and register the session components.

    Registered keys: ``token_settings``, ``token_codec``, ``refresh_token_store``,
    ``principal_directory``, ``session_manager`` and ``identity_service``.

    :raises RuntimeError: On an invalid session configuration.
    """
    validate_config(app.config)

    settings = TokenSettings.from_config(app.config)
    verifier = CredentialVerifier(app.config.get("PASSWORD_HASH_METHOD"))
    codec = JWTTokenCodec(settings)
    store = build_store(app, settings)
    directory = SQLAlchemyPrincipalDirectory()

    app.extensions["token_settings"] = settings
    app.extensions["token_codec"] = codec
    app.extensions["refresh_token_store"] = store
    app.extensions["principal_directory"] = directory
    app.extensions["session_manager"] = SessionTokenManager(
        codec=codec, store=store, directory=directory, verifier=verifier
    )
    app.extensions["identity_service"] = IdentityService(directory=directory, verifier=verifier)

    log.info("sessions.ready", extra={"store": store.backend})


def get_session_manager() -> SessionTokenManager:
    return cast(SessionTokenManager, current_app.extensions["session_manager"])


def get_identity_service() -> IdentityService:
    return cast(IdentityService, current_app.extensions["identity_service"])


def get_token_codec() -> JWTTokenCodec:
    return cast(JWTTokenCodec, current_app.extensions["token_codec"])


def get_refresh_token_store() -> RefreshTokenStore:
    return cast(RefreshTokenStore, current_app.extensions["refresh_token_store"])
