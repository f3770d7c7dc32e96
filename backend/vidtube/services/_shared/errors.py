"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic**: they never depend on Flask or
HTTP. They are the stable contract between the session token manager, the
identity service, the storage adapters and the delivery layer.

The translation to HTTP responses (RFC 7807) is handled by
``vidtube/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL includes the constraint name in the message; SQLite reports the
    column list instead, so ``uq_users_email`` also matches ``users.email``.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Constraint name (e.g. ``'uq_users_email'``).
    :returns: ``True`` if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    if constraint_name.startswith("uq_"):
        table, _, column = constraint_name[3:].partition("_")
        return f"{table}.{column}" in message
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - BaseService translates them to APIError at the delivery boundary.
    """


# --------------------------------------------------------------------------- #
# Lookup / uniqueness
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :param key: Identifier or search key.
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


class PrincipalNotFoundError(NotFoundError):
    """No principal matches the given handle, contact address or id."""

    def __init__(self, key: str | int) -> None:
        super().__init__("User", key)

    def __str__(self) -> str:
        return "User does not exist"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :param detail: Short human-readable explanation.
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


# --------------------------------------------------------------------------- #
# Authentication / session lifecycle
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Common parent of every 401-class failure."""

    default_message = "Unauthorized request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidCredentialsError(AuthenticationError):
    """The submitted secret does not match the stored hash."""

    default_message = "Invalid user credentials"


class TokenInvalidError(AuthenticationError):
    """Bad signature, malformed token, wrong kind or missing subject."""

    default_message = "Invalid token"


class TokenExpiredError(TokenInvalidError):
    """Signature is valid but the expiry instant has passed."""

    default_message = "Token has expired"


class UnauthorizedError(AuthenticationError):
    """A refresh was refused: missing, invalid, expired, revoked or superseded token."""


class StoreUnavailableError(ServiceError):
    """
    The session store could not be reached or did not answer in time.

    :param store: Backend label (``"database"``, ``"redis"``) for logs.
    """

    def __init__(self, store: str, message: str = "Session store unavailable") -> None:
        super().__init__(message)
        self.store = store
