"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, scoped_session

from vidtube.core.extensions import db
from vidtube.repositories import UserRepository
from vidtube.uow.base import UnitOfWork

log = logging.getLogger(__name__)

_ISOLATION_LEVELS = ("READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE", "READ UNCOMMITTED")
_SET_TRANSACTION_DIALECTS = ("postgresql", "mysql", "mariadb")


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write UoW over the Flask-scoped session.

    Commits on a clean exit; rolls back (and re-raises) otherwise.
    """

    def __init__(self, session: Session | None = None) -> None:
        super().__init__(session=session if session is not None else db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only UoW over the Flask-scoped session.

    * When no transaction is active the UoW owns a fresh one, applies
      ``SET TRANSACTION`` isolation/READ ONLY on PostgreSQL and MySQL, and rolls
      it back on exit.
    * When a transaction is already active (an outer UoW or a test fixture) it
      attaches to it and leaves it untouched on exit.
    * In both cases a ``before_flush`` guard rejects pending ORM writes.
      ``commit()`` always raises.

    :param isolation_level: Isolation hint such as ``"READ COMMITTED"``.
    :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
    """

    def __init__(
        self,
        *,
        session: Session | None = None,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=session if session is not None else db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._owns_transaction = False
        self._guarded: Session | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # Listen on the concrete Session: a scoped_session target would install
        # the guard on every session produced by its factory.
        self._guarded = (
            self.session() if isinstance(self.session, scoped_session) else self.session
        )
        self._owns_transaction = not self._guarded.in_transaction()
        if self._owns_transaction:
            self._guarded.begin()
            self._apply_transaction_directives()
        event.listen(self._guarded, "before_flush", self._block_flush)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        guarded = self._guarded
        try:
            if self._owns_transaction and guarded is not None:
                guarded.rollback()
        finally:
            if guarded is not None:
                with suppress(Exception):
                    event.remove(guarded, "before_flush", self._block_flush)
            self._guarded = None
            self._owns_transaction = False

    def commit(self) -> None:
        """
        :raises RuntimeError: always; read-only scopes never commit.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Guards ------------------------------------

    @staticmethod
    def _block_flush(session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError(
                "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
            )

    def _apply_transaction_directives(self) -> None:
        assert self._guarded is not None
        dialect = self._guarded.get_bind().dialect.name
        if dialect not in _SET_TRANSACTION_DIALECTS:
            return
        try:
            if self.isolation_level:
                iso = self.isolation_level.upper().strip()
                if iso not in _ISOLATION_LEVELS:
                    raise ValueError(f"Unknown isolation level {iso!r}")
                self._guarded.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
            if self.enforce_db_readonly:
                self._guarded.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            log.warning("SET TRANSACTION directives failed (%s); falling back to guards.", exc)
