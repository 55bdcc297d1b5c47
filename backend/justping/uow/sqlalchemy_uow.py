"""
SQLAlchemy Units of Work over the Flask-scoped session.

Both flavours expose the same repositories (``businesses``, ``users``,
``roles``, ``token_blacklist``) bound to one session, so every write of a
use case lands in a single transaction.
"""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from justping.core.extensions import db
from justping.repositories import (
    BusinessRepository,
    BusinessUserRepository,
    RoleRepository,
    TokenBlacklistRepository,
)
from justping.uow.base import UnitOfWork

log = logging.getLogger(__name__)

# Dialects that accept ``SET TRANSACTION ...`` as the first statement.
_SET_TRANSACTION_DIALECTS = frozenset({"postgresql", "mysql", "mariadb"})
_ISOLATION_LEVELS = frozenset({"READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE", "READ UNCOMMITTED"})
_WRITE_VERBS = frozenset(
    {"insert", "update", "delete", "merge", "upsert", "replace", "create", "alter", "drop", "truncate", "grant", "revoke"}
)


class _SessionRepositories:
    """Repositories sharing ``session``, the concrete session behind ``db.session`` for this app context."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.businesses = BusinessRepository(session=session)
        self.users = BusinessUserRepository(session=session)
        self.roles = RoleRepository(session=session)
        self.token_blacklist = TokenBlacklistRepository(session=session)


class SQLAlchemyUnitOfWork(_SessionRepositories, UnitOfWork):
    """
    Read-write Unit of Work.

    Commits on a clean exit and rolls back on any exception, including a
    failed commit, so a half-finished registration never becomes visible.
    """

    def __init__(self) -> None:
        super().__init__(db.session())

    def __enter__(self) -> SQLAlchemyUnitOfWork:
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


class _WriteGuard:
    """
    Session and connection listeners rejecting any write while installed.

    ORM flushes with pending new/dirty/deleted objects and raw DML/DDL both
    raise :class:`RuntimeError` before reaching the database.
    """

    def __init__(self, session: Session, target: Any) -> None:
        self.session = session
        self.target = target

    @staticmethod
    def _on_flush(session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked (pending changes present).")

    @staticmethod
    def _on_execute(conn, cursor, statement, parameters, context, executemany) -> None:
        verb = statement.lstrip().split(None, 1)[0].lower() if statement and statement.strip() else ""
        if verb in _WRITE_VERBS:
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {verb.upper()}")

    def install(self) -> None:
        event.listen(self.session, "before_flush", self._on_flush)
        event.listen(self.target, "before_cursor_execute", self._on_execute)

    def remove(self) -> None:
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._on_flush)
        with suppress(InvalidRequestError):
            event.remove(self.target, "before_cursor_execute", self._on_execute)


class SQLAlchemyReadOnlyUnitOfWork(_SessionRepositories, UnitOfWork):
    """
    Read-only Unit of Work.

    Parameters
    ----------
    isolation_level:
        Isolation hint such as ``"READ COMMITTED"``; ``None`` keeps the
        connection default.
    enforce_db_readonly:
        Also issue ``SET TRANSACTION READ ONLY`` where the dialect supports it.

    Notes
    -----
    - Write guards are always installed; on SQLite they are the only
      protection.
    - When the session already has a transaction running (e.g. inside a
      read-write UoW) the guards attach to it and the ``SET TRANSACTION``
      directives are skipped; otherwise the UoW owns its transaction and
      always rolls it back.
    - :meth:`commit` always raises.
    """

    def __init__(self, *, isolation_level: str | None = "READ COMMITTED", enforce_db_readonly: bool = True) -> None:
        super().__init__(db.session())
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._owned_txn: SessionTransaction | None = None
        self._guard: _WriteGuard | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        if not self.session.in_transaction():
            self._owned_txn = self.session.begin()
        conn = self.session.connection()
        self._guard = _WriteGuard(self.session, conn)
        self._guard.install()
        if self._owned_txn is not None:
            self._apply_transaction_directives(conn)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned_txn is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
        finally:
            self._owned_txn = None
            if self._guard is not None:
                self._guard.remove()
                self._guard = None

    def _apply_transaction_directives(self, conn: Connection) -> None:
        if conn.dialect.name not in _SET_TRANSACTION_DIALECTS:
            return
        try:
            if self.isolation_level:
                level = self.isolation_level.upper().strip()
                if level not in _ISOLATION_LEVELS:
                    log.warning("Unknown isolation level %r; sending as-is", level)
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            log.warning("SET TRANSACTION rejected (%s); relying on write guards", exc)

    def commit(self) -> None:
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
