# vidtube/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass

from vidtube.core import errors as api_errors
from vidtube.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    PrincipalNotFoundError,
    ServiceError,
    StoreUnavailableError,
    TokenExpiredError,
    TokenInvalidError,
    UnauthorizedError,
)
from vidtube.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor_id: Authenticated principal identifier.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: int | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation to the API layer.

    Notes
    -----
    Services never touch the global session directly; they go through a
    Unit of Work or a port.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(self, *, isolation: str | None = None) -> SQLAlchemyReadOnlyUnitOfWork:
        return SQLAlchemyReadOnlyUnitOfWork(isolation_level=isolation or self.DEFAULT_READ_ISOLATION)

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :returns: Translated exception ready to be re-raised; unknown
            exceptions are returned untouched.
        """
        if isinstance(exc, PrincipalNotFoundError):
            return api_errors.NotFound(str(exc), code="principal_not_found")

        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        if isinstance(exc, InvalidCredentialsError):
            return api_errors.Unauthorized(str(exc), code="invalid_credentials")

        # TokenExpiredError subclasses TokenInvalidError: test it first
        if isinstance(exc, TokenExpiredError):
            return api_errors.Unauthorized(str(exc), code="token_expired")

        if isinstance(exc, TokenInvalidError):
            return api_errors.Unauthorized(str(exc), code="token_invalid")

        if isinstance(exc, UnauthorizedError):
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, StoreUnavailableError):
            return api_errors.ServiceUnavailable(str(exc))

        # Any other ServiceError subclass -> 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")

        return exc
