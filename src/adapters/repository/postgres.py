"""
PostgreSQL repository adapter - Implements UserRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Connection Rules:
-----------------
1. **Writes** (create_user, create_account_confirmation, confirm_user_account)
   run only on the owning Unit of Work's transaction connection. Without an
   active transaction they fail with RepositoryError instead of silently
   autocommitting.

2. **Reads** run on the transaction connection when one is active, so a
   duplicate check observes the same snapshot as the insert it gates.
   Otherwise they borrow a short-lived connection from the pool.

3. **Failures** of any kind (constraint, I/O, pool timeout) surface as
   RepositoryError(500) with the driver exception as child_error. Unique
   constraint violations additionally carry the constraint name so the
   service can report them as a conflict.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional
from uuid import UUID

import psycopg
from psycopg import Connection
from psycopg.errors import UniqueViolation
from psycopg_pool import ConnectionPool

from src.domain.exceptions import RepositoryError
from src.domain.models import AccountConfirmation, User

logger = logging.getLogger(__name__)

USER_COLUMNS = (
    "id, username, email, password, salt, registration_date, "
    "is_account_confirmed, is_account_deleted, phone_number"
)

# src/adapters/repository/postgres.py -> <project root>/migrations
MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        transaction: Callable[[], Optional[Connection]],
    ) -> None:
        """
        Initialize repository.

        Args:
            pool: psycopg3 ConnectionPool used for reads outside a transaction
            transaction: Returns the owning Unit of Work's transaction
                connection, or None while no transaction is active
        """
        self._pool = pool
        self._transaction = transaction

    def create_user(self, user: User) -> None:
        sql = """
            INSERT INTO "user" (id, username, email, password, salt, phone_number)
            VALUES (%s, %s, %s, %s, %s, %s)
        """
        operation = "PostgresUserRepository.create_user"
        argument = f"user: {user!r}"

        conn = self._writer(operation, argument)
        try:
            conn.execute(
                sql,
                (user.id, user.username, user.email, user.password_hash, user.salt, user.phone_number),
            )
        except psycopg.Error as e:
            raise _storage_error(
                "Database error occurred while trying to create a new user", operation, argument, e
            ) from e

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        return self._fetch_user(
            "id",
            user_id,
            "PostgresUserRepository.get_user_by_id",
            "Database error occurred while trying to get user by id",
        )

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self._fetch_user(
            "email",
            email,
            "PostgresUserRepository.get_user_by_email",
            "Database error occurred while trying to get user by email",
        )

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self._fetch_user(
            "username",
            username,
            "PostgresUserRepository.get_user_by_username",
            "Database error occurred while trying to get user by username",
        )

    def create_account_confirmation(self, confirmation: AccountConfirmation) -> None:
        sql = """
            INSERT INTO account_confirmation (user_id, confirmation_code, security_code)
            VALUES (%s, %s, %s)
        """
        operation = "PostgresUserRepository.create_account_confirmation"
        argument = f"confirmation: {confirmation!r}"

        conn = self._writer(operation, argument)
        try:
            conn.execute(
                sql,
                (confirmation.user_id, confirmation.confirmation_code, confirmation.security_code),
            )
        except psycopg.Error as e:
            raise _storage_error(
                "Database error occurred while trying to create an account confirmation entry",
                operation,
                argument,
                e,
            ) from e

    def get_account_confirmation_by_confirmation_code(
        self, confirmation_code: UUID
    ) -> Optional[AccountConfirmation]:
        sql = """
            SELECT user_id, confirmation_code, security_code
            FROM account_confirmation
            WHERE confirmation_code = %s
        """
        operation = "PostgresUserRepository.get_account_confirmation_by_confirmation_code"
        argument = f"confirmation_code: {confirmation_code}"

        try:
            with self._reader() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (confirmation_code,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            raise _storage_error(
                "Database error occurred while trying to get account confirmation by confirmation code",
                operation,
                argument,
                e,
            ) from e

        if row is None:
            return None
        return AccountConfirmation(
            user_id=row[0],
            confirmation_code=row[1],
            security_code=row[2].strip(),
        )

    def confirm_user_account(self, user_id: UUID) -> None:
        sql = """
            UPDATE "user"
            SET is_account_confirmed = TRUE
            WHERE id = %s
        """
        operation = "PostgresUserRepository.confirm_user_account"
        argument = f"user_id: {user_id}"

        conn = self._writer(operation, argument)
        try:
            conn.execute(sql, (user_id,))
        except psycopg.Error as e:
            raise _storage_error(
                "Database error occurred while trying to confirm user account", operation, argument, e
            ) from e

    def _fetch_user(self, column: str, value: Any, operation: str, message: str) -> Optional[User]:
        # column is always one of our literals, never client input
        sql = f'SELECT {USER_COLUMNS} FROM "user" WHERE {column} = %s'
        try:
            with self._reader() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (value,))
                row = cursor.fetchone()
        except psycopg.Error as e:
            raise _storage_error(message, operation, f"{column}: {value}", e) from e

        return _user_from_row(row) if row is not None else None

    @contextmanager
    def _reader(self) -> Iterator[Connection]:
        conn = self._transaction()
        if conn is not None:
            yield conn
            return
        with self._pool.connection() as pooled:
            yield pooled

    def _writer(self, operation: str, argument: str) -> Connection:
        conn = self._transaction()
        if conn is None:
            raise RepositoryError(
                "Write attempted without an active transaction",
                operation=operation,
                argument=argument,
            )
        return conn


def _user_from_row(row: tuple) -> User:
    return User(
        id=row[0],
        username=row[1],
        email=row[2],
        password_hash=bytes(row[3]),
        salt=bytes(row[4]),
        registration_date=row[5],
        is_account_confirmed=row[6],
        is_account_deleted=row[7],
        phone_number=row[8],
    )


def _storage_error(message: str, operation: str, argument: str, error: psycopg.Error) -> RepositoryError:
    constraint = None
    if isinstance(error, UniqueViolation):
        constraint = error.diag.constraint_name or "unique"
    return RepositoryError(
        message,
        operation=operation,
        argument=argument,
        child_error=error,
        violated_constraint=constraint,
    )


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> None:
    """
    Apply every *.sql file of migrations_dir in filename order.

    Files must be idempotent (CREATE ... IF NOT EXISTS): they run on every
    start. Each file runs in its own transaction; the first failure stops
    the run with RuntimeError.
    """
    if not migrations_dir.is_dir():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))
    logger.info("Applying %d migration(s) from %s", len(sql_files), migrations_dir)

    for sql_file in sql_files:
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())
        except psycopg.Error as e:
            logger.error("Migration %s failed: %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
        logger.info("Applied migration %s", sql_file.name)
