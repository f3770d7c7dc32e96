# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class PrincipalRecord:
    """
    Internal snapshot of a principal, detached from the ORM session.

    Carries the salted hash so the credential verifier can run; it must never
    cross the delivery boundary. Use :meth:`public` for anything returned to
    callers.

    :param id: Principal identifier.
    :type id: int
    :param username: Lower-cased handle.
    :type username: str
    :param email: Lower-cased contact address.
    :type email: str
    :param full_name: Display name.
    :type full_name: str
    :param password_hash: Salted secret hash.
    :type password_hash: str
    :param avatar: Avatar media URL.
    :type avatar: str | None
    :param cover_image: Cover image media URL.
    :type cover_image: str | None
    """

    id: int
    username: str
    email: str
    full_name: str
    password_hash: str
    avatar: str | None = None
    cover_image: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, user: Any) -> PrincipalRecord:
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            password_hash=user.password_hash,
            avatar=user.avatar,
            cover_image=user.cover_image,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def public(self) -> PrincipalOut:
        return PrincipalOut(
            id=self.id,
            username=self.username,
            email=self.email,
            full_name=self.full_name,
            avatar=self.avatar,
            cover_image=self.cover_image,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def __repr__(self) -> str:
        return f"PrincipalRecord(id={self.id!r}, username={self.username!r})"


@dataclass(frozen=True, slots=True)
class PrincipalOut:
    """
    Secret-redacted principal view (no hash, no refresh token).

    :param id: Principal identifier.
    :type id: int
    :param username: Handle.
    :type username: str
    :param email: Contact address.
    :type email: str
    :param full_name: Display name.
    :type full_name: str
    """

    id: int
    username: str
    email: str
    full_name: str
    avatar: str | None = None
    cover_image: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
