# vidtube/infra/sqlalchemy/db_errors.py
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from vidtube.services._shared.errors import StoreUnavailableError

log = logging.getLogger(__name__)


@contextmanager
def unavailable_on_db_error(backend: str = "database") -> Iterator[None]:
    """
    Re-raise any :class:`SQLAlchemyError` as :class:`StoreUnavailableError`.

    Covers driver errors as well as ``sqlalchemy.exc.TimeoutError`` from an
    exhausted pool, which is not an ``OperationalError``.

    :param backend: Label carried on the raised error and the log record.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        log.error(
            "session store failure: %s",
            exc.__class__.__name__,
            extra={"event": "store.error", "store": backend},
        )
        raise StoreUnavailableError(backend) from exc
