"""
Shared fixtures for integration tests.

Requires PostgreSQL reachable at DATABASE_URL (via docker-compose);
every test in this directory is skipped when it is not.
"""

from collections.abc import Callable, Generator
from functools import partial
from unittest.mock import Mock

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from src.adapters.repository.postgres import run_migrations
from src.adapters.repository.unit_of_work import PostgresUnitOfWork
from src.config.settings import get_settings
from src.domain.credentials import CredentialTools
from src.domain.registration import RegistrationService


@pytest.fixture(scope="session")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests, or skip without a database."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        timeout=5,
        open=True,
    )
    try:
        pool.wait(timeout=5)
    except PoolTimeout:
        pool.close()
        pytest.skip(f"PostgreSQL not reachable at {settings.database_url}")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean user tables before each test."""
    with pool.connection() as conn:
        conn.execute('TRUNCATE account_confirmation, "user"')
    yield


@pytest.fixture
def unit_of_work_factory(pool: ConnectionPool) -> Callable[[], PostgresUnitOfWork]:
    return partial(PostgresUnitOfWork, pool)


@pytest.fixture
def fast_credentials() -> CredentialTools:
    """Argon2id with minimal cost so the suite stays quick."""
    return CredentialTools(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def sender() -> Mock:
    return Mock()


@pytest.fixture
def service(
    unit_of_work_factory: Callable[[], PostgresUnitOfWork],
    fast_credentials: CredentialTools,
    sender: Mock,
) -> RegistrationService:
    return RegistrationService(
        unit_of_work_factory=unit_of_work_factory,
        credentials=fast_credentials,
        confirmation_sender=sender,
    )


@pytest.fixture
def row_count(pool: ConnectionPool) -> Callable[[str], int]:
    """Count rows of a table outside any test transaction."""

    def _count(table: str) -> int:
        with pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(f"SELECT COUNT(*) FROM {table}")
            return cursor.fetchone()[0]

    return _count
