"""User repository: lookups, secret hash updates and the refresh-token column."""

from __future__ import annotations

from typing import cast

from sqlalchemy import or_, select, update

from vidtube.models.user import User
from vidtube.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Token *values* are opaque here: the repository never decodes or issues
    them, it only reads and conditionally replaces ``users.refresh_token``.
    """

    model = User

    def _updatable_fields(self):
        """Profile fields only; secrets and tokens have dedicated methods."""
        return {"email", "full_name", "avatar", "cover_image"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email.strip().lower())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username.strip().lower())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def find_by_handle_or_contact(
        self, *, username: str | None = None, email: str | None = None
    ) -> User | None:
        """Return the user matching ``username`` OR ``email`` (both normalized).

        :returns: ``None`` when neither identifier is given or nothing matches.
        """
        clauses = []
        if username and username.strip():
            clauses.append(User.username == username.strip().lower())
        if email and email.strip():
            clauses.append(User.email == email.strip().lower())
        if not clauses:
            return None
        stmt = select(User).where(or_(*clauses)).order_by(User.id)
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str, *, exclude_id: int | None = None) -> bool:
        stmt = select(User.id).where(User.email == email.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return bool(self.session.execute(stmt).first())

    def exists_by_username(self, username: str) -> bool:
        stmt = select(User.id).where(User.username == username.strip().lower())
        return bool(self.session.execute(stmt).first())

    # ---------------------------- Secret hash ----------------------------

    def update_password_hash(self, user_id: int, password_hash: str) -> bool:
        """Replace the stored hash. :returns: ``False`` when the user does not exist."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(password_hash=password_hash)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    # ---------------------------- Refresh token ----------------------------

    def get_refresh_token(self, user_id: int) -> str | None:
        """Read the column straight from the database, bypassing the identity map."""
        stmt = select(User.refresh_token).where(User.id == user_id)
        return cast(str | None, self.session.execute(stmt).scalar_one_or_none())

    def set_refresh_token(self, user_id: int, token: str | None) -> bool:
        """Unconditionally overwrite (``None`` clears). :returns: ``True`` if a row matched."""
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(refresh_token=token)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def swap_refresh_token(self, user_id: int, expected: str, new: str) -> bool:
        """
        Conditionally replace the token in a single ``UPDATE``.

        The ``WHERE refresh_token = :expected`` predicate makes the read-compare-write
        atomic at the database: of two concurrent swaps from the same
        ``expected`` value, only one matches a row.

        :returns: ``True`` when exactly one row was updated.
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.refresh_token == expected)
            .values(refresh_token=new)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1
