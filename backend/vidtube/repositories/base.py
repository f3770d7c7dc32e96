"""Generic persistence-only repository for SQLAlchemy 2.x aggregates.

Repositories stay thin:

* no commit/rollback (the Unit of Work owns the transaction),
* no business rules,
* no mass-assignment: every update goes through ``_updatable_fields``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import select
from sqlalchemy.orm import InstrumentedAttribute, Session

from vidtube.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Generic repository for a single aggregate.

    Subclasses MUST define ``model`` and MAY override ``_updatable_fields``.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Session shared across the Unit of Work scope. Falls back
            to the Flask-scoped ``db.session`` when omitted.
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session, else the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _updatable_fields(self) -> set[str]:
        """Whitelist of keys assignable through :meth:`update`."""
        return set()

    # ------------------------------ Internals --------------------------------

    def _sanitize_update_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """
        Keep only whitelisted keys.

        :raises ValueError: On unknown keys or when no whitelist is configured.
        """
        allowed = self._updatable_fields()
        if fields and not allowed:
            raise ValueError("No updatable fields configured for this repository.")
        unknown = sorted(k for k in fields if k not in allowed)
        if unknown:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        return dict(fields)

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so the primary key is materialized."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        result = self.session.execute(select(self.model).where(pk_attr == entity_id))
        return cast(E | None, result.scalars().first())

    def get_for_update(self, entity_id: Any) -> E | None:
        """Like :meth:`get` but with ``SELECT ... FOR UPDATE`` where the dialect supports it."""
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get_for_update requires a detectable PK.")
        stmt = select(self.model).where(pk_attr == entity_id).with_for_update()
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def flush(self) -> None:
        self.session.flush()

    # ----------------------------- Safe updates -------------------------------

    def update(self, instance: E, **fields: Any) -> E:
        """
        Assign whitelisted ``fields`` via ``setattr`` and flush.

        ``setattr`` keeps SQLAlchemy ``@validates`` hooks on the model in play.

        :raises ValueError: On non-whitelisted keys.
        """
        for key, value in self._sanitize_update_fields(fields).items():
            setattr(instance, key, value)
        self.flush()
        return instance
