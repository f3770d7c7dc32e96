# vidtube/infra/sqlalchemy/sqlalchemy_refresh_token_store.py
from __future__ import annotations

import logging
from collections.abc import Callable

from vidtube.infra.sqlalchemy.db_errors import unavailable_on_db_error
from vidtube.services._shared.errors import PrincipalNotFoundError
from vidtube.services._shared.ports import RefreshTokenStore
from vidtube.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Keep the current refresh token in ``users.refresh_token``.

    Every call runs in its own unit of work. Rotation is a single conditional
    ``UPDATE ... WHERE refresh_token = :expected``, so the database decides
    which of two concurrent swaps wins. Driver and pool errors (including
    ``pool_timeout``) surface as :class:`StoreUnavailableError`.

    :param uow_factory: Read-write UoW factory (tests may pass one bound to a
        specific session).
    :param ro_uow_factory: Read-only UoW factory.
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

    def set_current_refresh_token(self, principal_id: int, token: str) -> None:
        """
        Overwrite the stored token.

        :raises PrincipalNotFoundError: No ``users`` row holds ``principal_id``;
            nothing was recorded.
        """
        with unavailable_on_db_error(self.backend), self._uow_factory() as uow:
            if not uow.users.set_refresh_token(principal_id, token):
                log.warning(
                    "refresh token not stored: unknown principal",
                    extra={"principal_id": principal_id, "store": self.backend},
                )
                raise PrincipalNotFoundError(principal_id)

    def get_current_refresh_token(self, principal_id: int) -> str | None:
        with unavailable_on_db_error(self.backend), self._ro_uow_factory() as uow:
            return uow.users.get_refresh_token(principal_id)

    def clear_current_refresh_token(self, principal_id: int) -> None:
        with unavailable_on_db_error(self.backend), self._uow_factory() as uow:
            uow.users.set_refresh_token(principal_id, None)

    def compare_and_swap(self, principal_id: int, expected: str, new: str) -> bool:
        with unavailable_on_db_error(self.backend), self._uow_factory() as uow:
            return uow.users.swap_refresh_token(principal_id, expected, new)
