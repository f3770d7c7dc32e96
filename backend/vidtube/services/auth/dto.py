# vidtube/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from vidtube.services._shared.dto import PrincipalOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    At least one of ``username`` / ``email`` must be given; when both are, a
    principal matching either one is accepted.

    :param password: Raw password (to be verified, never stored or logged).
    :type password: str
    :param username: Handle (case-insensitive).
    :type username: str | None
    :param email: Contact address (case-insensitive).
    :type email: str | None
    """

    password: str
    username: str | None = None
    email: str | None = None

    def __repr__(self) -> str:
        return f"LoginIn(username={self.username!r}, email={self.email!r})"


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT, ``None`` when the client sent none.
    :type refresh_token: str | None
    """

    refresh_token: str | None

    def __repr__(self) -> str:
        return f"RefreshIn(refresh_token={'<redacted>' if self.refresh_token else None})"


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param principal_id: Identifier resolved from the caller's access token.
    :type principal_id: int
    """

    principal_id: int


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Access and refresh tokens issued together.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str

    def __repr__(self) -> str:
        return "TokenPairOut(<redacted>)"


@dataclass(frozen=True, slots=True)
class SessionOut:
    """
    Result of a successful login.

    :param tokens: The freshly issued pair.
    :type tokens: TokenPairOut
    :param principal: Secret-redacted principal.
    :type principal: PrincipalOut
    """

    tokens: TokenPairOut
    principal: PrincipalOut

    @property
    def access_token(self) -> str:
        return self.tokens.access_token

    @property
    def refresh_token(self) -> str:
        return self.tokens.refresh_token


# ------------------------------ Settings ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Immutable token settings, built once at startup from Flask config.

    :param access_secret: HMAC key for access tokens.
    :type access_secret: str
    :param refresh_secret: HMAC key for refresh tokens (distinct from ``access_secret``).
    :type refresh_secret: str
    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    :param algorithm: JWS algorithm (HMAC family).
    :type algorithm: str
    :param issuer: Optional ``iss`` claim.
    :type issuer: str | None
    """

    access_secret: str
    refresh_secret: str
    access_expires: timedelta = timedelta(minutes=15)
    refresh_expires: timedelta = timedelta(days=10)
    algorithm: str = "HS256"
    issuer: str | None = None

    def __repr__(self) -> str:
        return (
            f"TokenSettings(algorithm={self.algorithm!r}, access_expires={self.access_expires!r}, "
            f"refresh_expires={self.refresh_expires!r}, issuer={self.issuer!r})"
        )

    @classmethod
    def from_config(cls, config) -> TokenSettings:
        """Read the ``JWT_*`` keys from a Flask config mapping."""
        return cls(
            access_secret=config["JWT_SECRET_KEY"],
            refresh_secret=config["JWT_REFRESH_SECRET_KEY"],
            access_expires=config.get("JWT_ACCESS_TOKEN_EXPIRES", timedelta(minutes=15)),
            refresh_expires=config.get("JWT_REFRESH_TOKEN_EXPIRES", timedelta(days=10)),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER"),
        )
