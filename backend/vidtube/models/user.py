"""Principal model: the account that logs in and owns a session."""

from __future__ import annotations

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from vidtube.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Channel owner account.

    Fields
    ------
    username : str
        Public handle. Stored lower-cased and trimmed; unique.
    email : str
        Contact address. Stored lower-cased and trimmed; unique.
    full_name : str
        Display name.
    avatar : str | None
        URL of the avatar image on the media host.
    cover_image : str | None
        URL of the channel cover image on the media host.
    password_hash : str
        Salted hash from :class:`~vidtube.core.security.CredentialVerifier`.
        Never serialized.
    refresh_token : str | None
        The single currently-valid refresh token, ``None`` when signed out.
        Only the ``database`` session store reads or writes it.
    """

    __tablename__ = "users"
    __repr_fields__ = ("username",)

    # Columns
    username: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)
    cover_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
    )

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """
        Normalize the handle to its stored lower-case form.

        :raises ValueError: If username is missing or only whitespace.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        return value.strip().lower()

    @validates("full_name")
    def _normalize_full_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Full name is required.")
        return value.strip()
