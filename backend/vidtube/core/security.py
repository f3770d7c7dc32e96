"""Password hashing and constant-time credential checks."""

from __future__ import annotations

from typing import Protocol

from werkzeug.security import check_password_hash, generate_password_hash


class HasSecretHash(Protocol):
    """Anything carrying a stored salted hash (ORM ``User`` or ``PrincipalRecord``)."""

    @property
    def password_hash(self) -> str | None: ...


class CredentialVerifier:
    """
    Produce and check salted secret hashes.

    Hashing and comparison are delegated to :mod:`werkzeug.security`, whose
    ``check_password_hash`` recomputes the salted digest and compares it with
    :func:`hmac.compare_digest`. Neither method logs or returns the secret or
    the stored hash.

    :param method: ``werkzeug`` hash method spec (``"scrypt"``, ``"pbkdf2:sha256"``...).
        ``None`` keeps werkzeug's default.
    """

    def __init__(self, method: str | None = None) -> None:
        self.method = method

    def hash(self, secret: str) -> str:
        """
        Return a freshly salted hash for ``secret``.

        :raises ValueError: When ``secret`` is empty or not a string.
        """
        if not isinstance(secret, str) or not secret:
            raise ValueError("Password must be a non-empty string.")
        if self.method is None:
            return generate_password_hash(secret)
        return generate_password_hash(secret, method=self.method)

    def verify(self, principal: HasSecretHash | str | None, submitted_secret: str) -> bool:
        """
        Check ``submitted_secret`` against the principal's stored hash.

        :param principal: Object exposing ``password_hash`` or the hash itself.
        :param submitted_secret: Plain secret presented by the caller.
        :returns: ``True`` on match. A missing/empty stored hash or an empty
            submission is always ``False``.
        """
        stored = principal if isinstance(principal, str) or principal is None else (
            principal.password_hash
        )
        if not stored or not isinstance(submitted_secret, str) or not submitted_secret:
            return False
        return bool(check_password_hash(stored, submitted_secret))
