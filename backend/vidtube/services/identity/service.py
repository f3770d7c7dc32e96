"""
IdentityService
===============

Application service around the ``User`` aggregate:

- Registration (handle and contact address uniqueness)
- Current-user lookup
- Account details and profile media
- Password change (verification through the credential verifier)

Sessions are not opened or closed here; see
:class:`vidtube.services.auth.service.SessionTokenManager`.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from vidtube.core.security import CredentialVerifier
from vidtube.repositories.user import UserRepository
from vidtube.services._shared.base import BaseService
from vidtube.services._shared.dto import PrincipalOut, PrincipalRecord
from vidtube.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    PrincipalNotFoundError,
    ServiceError,
    violates,
)
from vidtube.services._shared.ports import PrincipalDirectory
from vidtube.services.identity.dto import AccountUpdateIn, PasswordChangeIn, RegisterIn

log = logging.getLogger(__name__)


def _conflict_from(exc: IntegrityError) -> ConflictError | None:
    if violates(exc, "uq_users_email"):
        return ConflictError("User", "email already in use")
    if violates(exc, "uq_users_username"):
        return ConflictError("User", "username already in use")
    return None


class IdentityService(BaseService):
    """
    Application service for principal accounts.

    :param directory: Principal lookup and secret-hash persistence.
    :param verifier: Hashes and checks passwords.
    """

    def __init__(
        self,
        *,
        directory: PrincipalDirectory,
        verifier: CredentialVerifier | None = None,
    ) -> None:
        super().__init__()
        self.directory = directory
        self.verifier = verifier or CredentialVerifier()

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: RegisterIn) -> PrincipalOut:
        """
        Create a principal. Does not open a session.

        :raises ConflictError: Handle or contact address already taken.
        :raises ServiceError: A field fails model validation.
        """
        try:
            password_hash = self.verifier.hash(dto.password)
        except ValueError as exc:
            raise ServiceError(str(exc)) from exc

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users

            if repo.exists_by_username(dto.username):
                raise ConflictError("User", "username already in use")
            if repo.exists_by_email(dto.email):
                raise ConflictError("User", "email already in use")

            try:
                user = repo.model(
                    username=dto.username,
                    email=dto.email,
                    full_name=dto.full_name,
                    password_hash=password_hash,
                    avatar=dto.avatar,
                    cover_image=dto.cover_image,
                )
                repo.add(user)
            except ValueError as exc:
                raise ServiceError(str(exc)) from exc
            except IntegrityError as exc:
                conflict = _conflict_from(exc)
                if conflict is None:
                    raise
                raise conflict from exc

            out = PrincipalRecord.from_model(user).public()

        log.info("identity.registered", extra={"event": "register", "principal_id": out.id})
        return out

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_current(self, principal_id: int) -> PrincipalOut:
        """:raises PrincipalNotFoundError: Unknown principal."""
        with self.ro_uow() as uow:
            user = uow.users.get(principal_id)
            if user is None:
                raise PrincipalNotFoundError(principal_id)
            return PrincipalRecord.from_model(user).public()

    # --------------------------------------------------------------------- #
    # Account details and media
    # --------------------------------------------------------------------- #

    def update_account(self, principal_id: int, dto: AccountUpdateIn) -> PrincipalOut:
        """
        Replace display name and contact address.

        :raises ServiceError: A field is blank or malformed.
        :raises ConflictError: The address belongs to another principal.
        :raises PrincipalNotFoundError: Unknown principal.
        """
        if not (dto.full_name and dto.full_name.strip()) or not (dto.email and dto.email.strip()):
            raise ServiceError("All fields are required")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(principal_id)
            if user is None:
                raise PrincipalNotFoundError(principal_id)

            if repo.exists_by_email(dto.email, exclude_id=principal_id):
                raise ConflictError("User", "email already in use")

            try:
                repo.update(user, full_name=dto.full_name, email=dto.email)
            except ValueError as exc:
                raise ServiceError(str(exc)) from exc
            except IntegrityError as exc:
                conflict = _conflict_from(exc)
                if conflict is None:
                    raise
                raise conflict from exc

            return PrincipalRecord.from_model(user).public()

    def update_media(
        self,
        principal_id: int,
        *,
        avatar: str | None = None,
        cover_image: str | None = None,
    ) -> PrincipalOut:
        """
        Replace profile media references; ``None`` leaves a field unchanged.

        :raises ServiceError: Nothing to update.
        :raises PrincipalNotFoundError: Unknown principal.
        """
        updates = {k: v for k, v in {"avatar": avatar, "cover_image": cover_image}.items() if v}
        if not updates:
            raise ServiceError("Media URL is missing")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(principal_id)
            if user is None:
                raise PrincipalNotFoundError(principal_id)
            repo.update(user, **updates)
            return PrincipalRecord.from_model(user).public()

    # --------------------------------------------------------------------- #
    # Password management
    # --------------------------------------------------------------------- #

    def change_password(self, dto: PasswordChangeIn) -> None:
        """
        Change a password after verifying the old one.

        The current session, if any, is left in place.

        :raises PrincipalNotFoundError: Unknown principal.
        :raises InvalidCredentialsError: ``old_password`` does not match.
        :raises ServiceError: ``new_password`` is empty.
        """
        principal = self.directory.get(dto.principal_id)
        if principal is None:
            raise PrincipalNotFoundError(dto.principal_id)

        if not self.verifier.verify(principal, dto.old_password):
            raise InvalidCredentialsError("Invalid old password")

        try:
            new_hash = self.verifier.hash(dto.new_password)
        except ValueError as exc:
            raise ServiceError(str(exc)) from exc

        self.directory.update_secret_hash(dto.principal_id, new_hash)
        log.info("identity.password_changed", extra={"event": "change_password", "principal_id": dto.principal_id})
