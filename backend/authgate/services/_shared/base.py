from __future__ import annotations

from http import HTTPStatus

from authgate.core import errors as api_errors
from authgate.services._shared.errors import (
    ConflictError,
    IdentityVerificationFailure,
    InvalidCredentials,
    NotFoundError,
    ServiceError,
    TokenOperationFailure,
    ValidationFailure,
)
from authgate.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize translation of service errors into API errors.

    Notes
    -----
    Services never touch the global session directly; they go through a UoW.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. ``"REPEATABLE READ"``).
        :type isolation: str | None
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        # ConflictError subclasses ValidationFailure: check it first.
        if isinstance(exc, ConflictError):
            details = {"field": exc.field} if exc.field else None
            return api_errors.Conflict(exc.message, details=details)

        if isinstance(exc, ValidationFailure):
            details = {"field": exc.field} if exc.field else None
            return api_errors.UnprocessableEntity(exc.message, details=details)

        if isinstance(exc, InvalidCredentials):
            return api_errors.Unauthorized(str(exc), code="invalid_credentials")

        if isinstance(exc, TokenOperationFailure):
            return api_errors.Unauthorized(str(exc) or "Token operation failed", code="token_error")

        if isinstance(exc, IdentityVerificationFailure):
            return api_errors.Unauthorized(str(exc), code="identity_verification_failed")

        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=HTTPStatus.BAD_REQUEST,
                code="bad_request",
            )

        # Anything else bubbles up to the generic Flask handler.
        return exc
