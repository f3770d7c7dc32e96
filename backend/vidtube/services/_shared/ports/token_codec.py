from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Protocol

from vidtube.services._shared.errors import TokenExpiredError, TokenInvalidError


class TokenKind(str, Enum):
    """Value of the ``type`` claim; also selects the signing key."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenCodec(Protocol):
    """
    Port for issuing and validating signed, expiring bearer tokens.

    Implementations are pure functions of the token bytes, their immutable
    settings, an injected clock and an injected token-id factory.
    """

    def issue_access_token(self, subject_id: int | str, claims: dict[str, Any] | None = None) -> str:
        """Sign a short-lived access token for ``subject_id``."""

    def issue_refresh_token(self, subject_id: int | str) -> str:
        """Sign a long-lived refresh token for ``subject_id``."""

    def verify(self, token: str, expected_kind: TokenKind) -> str:
        """
        Validate signature, kind and expiry.

        :returns: The subject identifier as a string.
        :raises TokenExpiredError: Valid signature, expiry in the past.
        :raises TokenInvalidError: Anything else wrong with the token.
        """


class StubTokenCodec(TokenCodec):
    """
    Deterministic in-memory codec used in unit tests.

    Tokens look like ``refresh.<subject>.<seq>``; :meth:`expire` marks a token
    as past its expiry without touching a clock.
    """

    def __init__(self) -> None:
        self._seq = 0
        self._lock = threading.Lock()
        self._issued: dict[str, tuple[TokenKind, str]] = {}
        self._expired: set[str] = set()
        self.claims: dict[str, dict[str, Any]] = {}

    def _mk(self, kind: TokenKind, subject_id: int | str) -> str:
        with self._lock:
            self._seq += 1
            token = f"{kind.value}.{subject_id}.{self._seq}"
            self._issued[token] = (kind, str(subject_id))
        return token

    def issue_access_token(self, subject_id: int | str, claims: dict[str, Any] | None = None) -> str:
        token = self._mk(TokenKind.ACCESS, subject_id)
        self.claims[token] = dict(claims or {})
        return token

    def issue_refresh_token(self, subject_id: int | str) -> str:
        return self._mk(TokenKind.REFRESH, subject_id)

    def expire(self, token: str) -> None:
        self._expired.add(token)

    def verify(self, token: str, expected_kind: TokenKind) -> str:
        issued = self._issued.get(token)
        if issued is None:
            raise TokenInvalidError("Unknown token")
        kind, subject = issued
        if kind is not expected_kind:
            raise TokenInvalidError(f"Expected a {expected_kind.value} token")
        if token in self._expired:
            raise TokenExpiredError()
        return subject
