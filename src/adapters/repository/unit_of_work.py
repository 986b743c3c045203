"""
PostgreSQL Unit of Work - Implements UnitOfWork protocol.

One instance owns at most one transaction for one business operation:

    IDLE --begin_transaction--> ACTIVE --commit/rollback--> CLOSED

CLOSED is terminal; a closed instance cannot be restarted. The transaction
connection is checked out of the pool on begin and returned on commit or
rollback, so the pool's max_size also caps concurrent transactions. When the
pool is exhausted, begin waits up to the pool timeout before failing.

Used as a context manager, leaving the block while the transaction is still
ACTIVE (exception, interruption, early return) rolls it back.
"""

import logging
import threading
from enum import Enum
from types import TracebackType
from typing import Optional

import psycopg
from psycopg import Connection
from psycopg.errors import UniqueViolation
from psycopg_pool import ConnectionPool

from src.domain.exceptions import TransactionError

from .postgres import PostgresUserRepository

logger = logging.getLogger(__name__)


class TransactionState(str, Enum):
    """Lifecycle of a Unit of Work."""

    IDLE = "IDLE"
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class PostgresUnitOfWork:
    """
    Implements UnitOfWork protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool
        self._state = TransactionState.IDLE
        self._connection: Optional[Connection] = None
        self._repository: Optional[PostgresUserRepository] = None
        self._repository_lock = threading.Lock()

    @property
    def state(self) -> TransactionState:
        return self._state

    def begin_transaction(self) -> None:
        operation = "PostgresUnitOfWork.begin_transaction"
        if self._state is TransactionState.ACTIVE:
            raise TransactionError("Transaction already started", operation=operation)
        if self._state is TransactionState.CLOSED:
            raise TransactionError("Unit of work already closed", operation=operation)

        try:
            conn = self._pool.getconn()
        except psycopg.Error as e:
            raise TransactionError(
                "Failed to begin transaction", operation=operation, child_error=e
            ) from e

        try:
            # psycopg opens the transaction implicitly on the first statement
            conn.autocommit = False
        except psycopg.Error as e:
            self._pool.putconn(conn)
            raise TransactionError(
                "Failed to begin transaction", operation=operation, child_error=e
            ) from e

        self._connection = conn
        self._state = TransactionState.ACTIVE

    def repository(self) -> PostgresUserRepository:
        """
        Repository bound to this Unit of Work, created once on first access.

        Safe under concurrent first access: every caller gets the same instance.
        """
        if self._repository is None:
            with self._repository_lock:
                if self._repository is None:
                    self._repository = PostgresUserRepository(self._pool, self._active_connection)
        return self._repository

    def commit(self) -> None:
        operation = "PostgresUnitOfWork.commit"
        conn = self._require_active(operation)
        try:
            conn.commit()
        except psycopg.Error as e:
            raise TransactionError(
                "Error occurred while committing changes to database",
                operation=operation,
                child_error=e,
                violated_constraint=_constraint_name(e),
            ) from e
        finally:
            self._close()

    def rollback(self) -> None:
        operation = "PostgresUnitOfWork.rollback"
        conn = self._require_active(operation)
        try:
            conn.rollback()
        except psycopg.Error as e:
            raise TransactionError(
                "Error occurred while rolling back changes",
                operation=operation,
                child_error=e,
            ) from e
        finally:
            self._close()

    def __enter__(self) -> "PostgresUnitOfWork":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if self._state is not TransactionState.ACTIVE:
            return
        try:
            self.rollback()
        except TransactionError as rollback_error:
            if exc is None:
                raise
            # Keep the original error; the failed rollback is only logged
            logger.error("Rollback failed while unwinding: %s", "; ".join(rollback_error.describe()))

    def _active_connection(self) -> Optional[Connection]:
        if self._state is TransactionState.ACTIVE:
            return self._connection
        return None

    def _require_active(self, operation: str) -> Connection:
        if self._state is TransactionState.IDLE:
            raise TransactionError("Transaction not started", operation=operation)
        if self._state is TransactionState.CLOSED or self._connection is None:
            raise TransactionError("Transaction already closed", operation=operation)
        return self._connection

    def _close(self) -> None:
        conn, self._connection = self._connection, None
        self._state = TransactionState.CLOSED
        if conn is not None:
            # The pool rolls back anything left open before reusing the connection
            self._pool.putconn(conn)


def _constraint_name(error: psycopg.Error) -> Optional[str]:
    if isinstance(error, UniqueViolation):
        return error.diag.constraint_name or "unique"
    return None
