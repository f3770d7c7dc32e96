# vidtube/infra/jwt/jwt_token_codec.py
from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import jwt
from jwt.exceptions import InvalidTokenError

from vidtube.services._shared.errors import TokenExpiredError, TokenInvalidError
from vidtube.services._shared.ports import TokenCodec, TokenKind
from vidtube.services.auth.dto import TokenSettings

# Claims every token must carry; the rest are optional
REQUIRED_CLAIMS = ["sub", "iat", "exp", "jti", "type"]
RESERVED_CLAIMS = frozenset({"sub", "iat", "nbf", "exp", "jti", "type", "iss", "fresh"})


class JWTTokenCodec(TokenCodec):
    """
    HMAC-signed JWT codec built on PyJWT.

    Access and refresh tokens are signed with distinct secrets, so one kind can
    never verify as the other. Time comes from an injected ``clock`` rather
    than from PyJWT, which keeps expiry decisions reproducible in tests.

    :param settings: Secrets, lifetimes, algorithm and issuer.
    :param clock: Returns the current aware UTC datetime.
    :param id_factory: Produces the ``jti`` of each token; keeps tokens
        issued within the same second distinct.
    """

    def __init__(
        self,
        settings: TokenSettings,
        *,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.settings = settings
        self._clock = clock or (lambda: datetime.now(UTC))
        self._id_factory = id_factory or (lambda: uuid4().hex)

    # ------------------------------------------------------------------ #
    # Issuing
    # ------------------------------------------------------------------ #

    def issue_access_token(self, subject_id: int | str, claims: dict[str, Any] | None = None) -> str:
        extra = {k: v for k, v in (claims or {}).items() if k not in RESERVED_CLAIMS}
        extra["fresh"] = False
        return self._encode(TokenKind.ACCESS, subject_id, extra)

    def issue_refresh_token(self, subject_id: int | str) -> str:
        return self._encode(TokenKind.REFRESH, subject_id, {})

    def _encode(self, kind: TokenKind, subject_id: int | str, extra: dict[str, Any]) -> str:
        now = self._clock()
        lifetime = (
            self.settings.access_expires if kind is TokenKind.ACCESS else self.settings.refresh_expires
        )
        payload: dict[str, Any] = {
            **extra,
            "sub": str(subject_id),
            "iat": int(now.timestamp()),
            "nbf": int(now.timestamp()),
            "exp": int((now + lifetime).timestamp()),
            "jti": self._id_factory(),
            "type": kind.value,
        }
        if self.settings.issuer:
            payload["iss"] = self.settings.issuer
        return jwt.encode(payload, self._secret_for(kind), algorithm=self.settings.algorithm)

    # ------------------------------------------------------------------ #
    # Verification
    # ------------------------------------------------------------------ #

    def verify(self, token: str, expected_kind: TokenKind) -> str:
        """
        Check signature, then kind, then expiry.

        :returns: The ``sub`` claim.
        :raises TokenInvalidError: Bad signature, malformed token, wrong kind,
            wrong issuer or not yet valid.
        :raises TokenExpiredError: ``exp`` is at or before the current instant.
        """
        claims = self.decode(token, expected_kind)

        if claims.get("type") != expected_kind.value:
            raise TokenInvalidError(f"Expected a {expected_kind.value} token")

        now = int(self._clock().timestamp())
        if int(claims["exp"]) <= now:
            raise TokenExpiredError()
        if int(claims.get("nbf", claims["iat"])) > now:
            raise TokenInvalidError("Token is not yet valid")

        subject = claims["sub"]
        if not subject:
            raise TokenInvalidError("Token has no subject")
        return str(subject)

    def decode(self, token: str, kind: TokenKind) -> dict[str, Any]:
        """Signature-checked claims, without any time validation."""
        if not token:
            raise TokenInvalidError("Token is empty")
        try:
            return jwt.decode(
                token,
                self._secret_for(kind),
                algorithms=[self.settings.algorithm],
                issuer=self.settings.issuer,
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "verify_iss": bool(self.settings.issuer),
                    "require": REQUIRED_CLAIMS,
                },
            )
        except InvalidTokenError as exc:
            raise TokenInvalidError() from exc

    def _secret_for(self, kind: TokenKind) -> str:
        if kind is TokenKind.ACCESS:
            return self.settings.access_secret
        return self.settings.refresh_secret
