"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param username: Public handle (stored lower-cased).
    :type username: str
    :param email: Contact address (stored lower-cased).
    :type email: str
    :param full_name: Display name.
    :type full_name: str
    :param password: Raw password, hashed before it reaches the model.
    :type password: str
    :param avatar: Avatar URL from the media host.
    :type avatar: str | None
    :param cover_image: Cover image URL from the media host.
    :type cover_image: str | None
    """

    username: str
    email: str
    full_name: str
    password: str
    avatar: str | None = None
    cover_image: str | None = None

    def __repr__(self) -> str:
        return f"RegisterIn(username={self.username!r}, email={self.email!r})"


@dataclass(frozen=True, slots=True)
class AccountUpdateIn:
    """
    Input DTO for account details. Both fields are required.

    :param full_name: New display name.
    :type full_name: str
    :param email: New contact address.
    :type email: str
    """

    full_name: str
    email: str


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    """
    Input DTO for changing a password.

    :param principal_id: Caller identifier.
    :type principal_id: int
    :param old_password: Current password.
    :type old_password: str
    :param new_password: New password (raw).
    :type new_password: str
    """

    principal_id: int
    old_password: str
    new_password: str

    def __repr__(self) -> str:
        return f"PasswordChangeIn(principal_id={self.principal_id!r})"
