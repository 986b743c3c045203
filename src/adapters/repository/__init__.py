"""Repository adapters - Database implementations."""

from .postgres import PostgresUserRepository, run_migrations
from .unit_of_work import PostgresUnitOfWork, TransactionState

__all__ = ["PostgresUnitOfWork", "PostgresUserRepository", "TransactionState", "run_migrations"]
