# vidtube/services/auth/service.py
from __future__ import annotations

import hmac
import logging
from typing import Any

from vidtube.core.security import CredentialVerifier
from vidtube.services._shared.base import BaseService
from vidtube.services._shared.dto import PrincipalRecord
from vidtube.services._shared.errors import (
    InvalidCredentialsError,
    PrincipalNotFoundError,
    ServiceError,
    TokenExpiredError,
    TokenInvalidError,
    UnauthorizedError,
)
from vidtube.services._shared.ports.principal_directory import PrincipalDirectory
from vidtube.services._shared.ports.refresh_token_store import RefreshTokenStore
from vidtube.services._shared.ports.token_codec import TokenCodec, TokenKind
from vidtube.services.auth.dto import (
    LoginIn,
    LogoutIn,
    RefreshIn,
    SessionOut,
    TokenPairOut,
)

log = logging.getLogger(__name__)


class SessionTokenManager(BaseService):
    """
    Session lifecycle: login, refresh (with rotation) and logout.

    Each principal has at most one live refresh token, held by the
    :class:`RefreshTokenStore`. Login overwrites it, refresh swaps it
    atomically for a new one, and logout clears it. Access tokens are stateless
    and stay valid until they expire, even after logout.

    Nothing is retried here. Every failure surfaces as a typed
    :class:`ServiceError`, and tokens are only handed out after the store
    write has succeeded.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        store: RefreshTokenStore,
        directory: PrincipalDirectory,
        verifier: CredentialVerifier | None = None,
    ) -> None:
        """
        :param codec: Signs and validates access/refresh tokens.
        :param store: Holds the current refresh token per principal.
        :param directory: Principal lookup.
        :param verifier: Salted-hash checker (werkzeug-backed by default).
        """
        super().__init__()
        self.codec = codec
        self.store = store
        self.directory = directory
        self.verifier = verifier or CredentialVerifier()

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> SessionOut:
        """
        Authenticate credentials and open a new session.

        :raises ServiceError: When neither username nor email is given.
        :raises PrincipalNotFoundError: No principal matches the identifier, or its
            row vanished before the refresh token was stored.
        :raises InvalidCredentialsError: Wrong password; the store is untouched.
        :raises StoreUnavailableError: The refresh token could not be recorded.
        """
        if not (dto.username or dto.email):
            raise ServiceError("username or email is required")

        principal = self.directory.find_by_handle_or_contact(
            username=dto.username, email=dto.email
        )
        if principal is None:
            log.info("auth.login.unknown_principal", extra={"event": "login"})
            raise PrincipalNotFoundError(dto.username or dto.email or "")

        if not self.verifier.verify(principal, dto.password):
            log.info(
                "auth.login.invalid_credentials",
                extra={"event": "login", "principal_id": principal.id},
            )
            raise InvalidCredentialsError()

        pair = self._issue_pair(principal)
        # Record server state before anything reaches the client
        self.store.set_current_refresh_token(principal.id, pair.refresh_token)

        log.info("auth.login.succeeded", extra={"event": "login", "principal_id": principal.id})
        return SessionOut(tokens=pair, principal=principal.public())

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Exchange the current refresh token for a new pair.

        The submitted token must verify as a refresh token, belong to an
        existing principal and equal the stored value (constant-time
        compare). The swap to the new token is a compare-and-swap on the
        store, so two concurrent refreshes of one token cannot both win.

        :raises UnauthorizedError: Missing, invalid, expired, superseded or
            revoked token, unknown principal, or a lost rotation race.
        :raises StoreUnavailableError: The store could not be consulted.
        """
        submitted = dto.refresh_token
        if not submitted:
            raise UnauthorizedError("Unauthorized request")

        try:
            subject = self.codec.verify(submitted, TokenKind.REFRESH)
        except TokenExpiredError as exc:
            self._reject("expired", None)
            raise UnauthorizedError("Refresh token is expired") from exc
        except TokenInvalidError as exc:
            self._reject("invalid", None)
            raise UnauthorizedError("Invalid refresh token") from exc

        principal_id = self._coerce_principal_id(subject)
        principal = self.directory.get(principal_id)
        if principal is None:
            self._reject("unknown_principal", principal_id)
            raise UnauthorizedError("Invalid refresh token")

        current = self.store.get_current_refresh_token(principal_id)
        if current is None or not hmac.compare_digest(current.encode(), submitted.encode()):
            self._reject("superseded", principal_id)
            raise UnauthorizedError("Refresh token is expired or used")

        pair = self._issue_pair(principal)
        if not self.store.compare_and_swap(principal_id, submitted, pair.refresh_token):
            self._reject("lost_race", principal_id)
            raise UnauthorizedError("Refresh token is expired or used")

        log.info("auth.refresh.rotated", extra={"event": "refresh", "principal_id": principal_id})
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Clear the principal's stored refresh token. Idempotent.

        :raises PrincipalNotFoundError: Unknown principal.
        :raises StoreUnavailableError: The store could not be updated.
        """
        if self.directory.get(dto.principal_id) is None:
            raise PrincipalNotFoundError(dto.principal_id)
        self.store.clear_current_refresh_token(dto.principal_id)
        log.info("auth.logout", extra={"event": "logout", "principal_id": dto.principal_id})

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _issue_pair(self, principal: PrincipalRecord) -> TokenPairOut:
        claims: dict[str, Any] = {
            "username": principal.username,
            "email": principal.email,
            "full_name": principal.full_name,
        }
        return TokenPairOut(
            access_token=self.codec.issue_access_token(principal.id, claims),
            refresh_token=self.codec.issue_refresh_token(principal.id),
        )

    @staticmethod
    def _coerce_principal_id(subject: str) -> int:
        try:
            return int(subject)
        except (TypeError, ValueError) as exc:
            raise UnauthorizedError("Invalid refresh token") from exc

    @staticmethod
    def _reject(reason: str, principal_id: int | None) -> None:
        log.warning(
            "auth.refresh.rejected reason=%s",
            reason,
            extra={"event": "refresh", "principal_id": principal_id},
        )
