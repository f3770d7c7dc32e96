# vidtube/infra/sqlalchemy/sqlalchemy_principal_directory.py
from __future__ import annotations

from collections.abc import Callable

from vidtube.infra.sqlalchemy.db_errors import unavailable_on_db_error
from vidtube.services._shared.dto import PrincipalRecord
from vidtube.services._shared.errors import PrincipalNotFoundError
from vidtube.services._shared.ports import PrincipalDirectory
from vidtube.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


class SQLAlchemyPrincipalDirectory(PrincipalDirectory):
    """
    :class:`PrincipalDirectory` over the ``users`` table.

    Records are detached snapshots; nothing returned here is bound to a session.
    Database failures, pool timeouts included, raise :class:`StoreUnavailableError`.
    """

    backend = "database"

    def __init__(
        self,
        *,
        uow_factory: Callable[[], SQLAlchemyUnitOfWork] | None = None,
        ro_uow_factory: Callable[[], SQLAlchemyReadOnlyUnitOfWork] | None = None,
    ) -> None:
        self._uow_factory = uow_factory or SQLAlchemyUnitOfWork
        self._ro_uow_factory = ro_uow_factory or SQLAlchemyReadOnlyUnitOfWork

    def find_by_handle_or_contact(
        self, *, username: str | None = None, email: str | None = None
    ) -> PrincipalRecord | None:
        with unavailable_on_db_error(self.backend), self._ro_uow_factory() as uow:
            user = uow.users.find_by_handle_or_contact(username=username, email=email)
            return PrincipalRecord.from_model(user) if user is not None else None

    def get(self, principal_id: int) -> PrincipalRecord | None:
        with unavailable_on_db_error(self.backend), self._ro_uow_factory() as uow:
            user = uow.users.get(principal_id)
            return PrincipalRecord.from_model(user) if user is not None else None

    def update_secret_hash(self, principal_id: int, secret_hash: str) -> None:
        with unavailable_on_db_error(self.backend), self._uow_factory() as uow:
            if not uow.users.update_password_hash(principal_id, secret_hash):
                raise PrincipalNotFoundError(principal_id)
