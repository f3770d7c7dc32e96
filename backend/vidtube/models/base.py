"""Reusable SQLAlchemy mixins shared by domain models (typed 2.0)."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column


class TimestampMixin:
    """Database-managed ``created_at`` / ``updated_at`` columns (timezone-aware)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class PKMixin:
    """Integer surrogate primary key named ``id``."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class ReprMixin:
    """Short ``__repr__`` built from ``id`` plus the names in ``__repr_fields__``.

    Secrets must never be listed in ``__repr_fields__``.
    """

    __repr_fields__: ClassVar[tuple[str, ...]] = ()

    def __repr__(self) -> str:
        parts = [f"id={getattr(self, 'id', None)}"]
        parts.extend(f"{name}={getattr(self, name, None)!r}" for name in self.__repr_fields__)
        return f"<{self.__class__.__name__} {' '.join(parts)}>"
