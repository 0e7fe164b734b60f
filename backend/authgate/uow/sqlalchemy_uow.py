"""
SQLAlchemy implementations of :class:`~authgate.uow.base.UnitOfWork` for Flask.
"""

from __future__ import annotations

import logging

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from authgate.core.extensions import db
from authgate.repositories import UserRepository
from authgate.uow.base import UnitOfWork

log = logging.getLogger(__name__)


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write UoW over the Flask-scoped session.

    Commits on a clean exit, rolls back when the block raises.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only UoW used for credential checks and profile lookups.

    While the scope is open, ORM flushes of pending changes and raw DML/DDL
    statements raise ``RuntimeError``. When the UoW owns the transaction it
    also issues ``SET TRANSACTION READ ONLY`` on PostgreSQL and always rolls
    back on exit. When a transaction is already running on the session
    (request autobegin, test fixtures) it attaches to it and only installs
    the guards.

    Parameters
    ----------
    isolation_level:
        Optional isolation hint applied on PostgreSQL, e.g. ``"READ COMMITTED"``.
    enforce_db_readonly:
        Apply ``SET TRANSACTION READ ONLY`` where the dialect supports it.
    """

    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
    )
    _ISOLATION_LEVELS = ("READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE")

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._conn: Connection | None = None
        self._txn: SessionTransaction | None = None
        self._guards_installed = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn = None
        try:
            self._txn = self.session.begin()
        except InvalidRequestError:
            # Already inside a transaction: attach without SET TRANSACTION.
            pass

        self._conn = self.session.connection()
        self._install_guards()

        if self._txn is not None and self._conn.dialect.name == "postgresql":
            self._apply_transaction_modes()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn is not None:
                self.session.rollback()
        finally:
            self._txn = None
            self._remove_guards()
            self._conn = None

    def commit(self) -> None:
        """
        :raises RuntimeError: always; read-only scopes never commit.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Guards -----------------------------

    def _apply_transaction_modes(self) -> None:
        try:
            if self.isolation_level:
                iso = self.isolation_level.upper().strip()
                if iso not in self._ISOLATION_LEVELS:
                    raise ValueError(f"Unsupported isolation level: {iso!r}")
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            log.warning("SET TRANSACTION failed (%s); relying on guards only.", exc)

    def _before_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")

    def _before_cursor_execute(
        self, conn, cursor, statement, parameters, context, executemany
    ) -> None:
        first = statement.lstrip().split(None, 1)[0].lower() if statement else ""
        if first.startswith(self._WRITE_PREFIXES):
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {first.upper()}")

    def _install_guards(self) -> None:
        if self._guards_installed:
            return
        event.listen(self.session, "before_flush", self._before_flush)
        event.listen(self._conn, "before_cursor_execute", self._before_cursor_execute)
        self._guards_installed = True

    def _remove_guards(self) -> None:
        if not self._guards_installed:
            return
        event.remove(self.session, "before_flush", self._before_flush)
        if self._conn is not None and event.contains(
            self._conn, "before_cursor_execute", self._before_cursor_execute
        ):
            event.remove(self._conn, "before_cursor_execute", self._before_cursor_execute)
        self._guards_installed = False
