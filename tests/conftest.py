"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory transactional store standing in for PostgreSQL
- Unit of Work / repository fakes bound to that store
- Deterministic credential tooling
- Registration service wiring
"""

import itertools
from collections.abc import Callable, Iterator
from dataclasses import replace
from typing import Optional
from unittest.mock import Mock
from uuid import UUID

import pytest

from src.domain.exceptions import AppError, RepositoryError, TransactionError
from src.domain.models import AccountConfirmation, CreateUserInput, User
from src.domain.registration import RegistrationService


class InMemoryStore:
    """Committed rows plus failure injection and transaction counters."""

    def __init__(self) -> None:
        self.users: dict[UUID, User] = {}
        self.confirmations: dict[UUID, AccountConfirmation] = {}
        self.fail_on: dict[str, BaseException] = {}
        self.commit_error: Optional[AppError] = None
        self.begins = 0
        self.commits = 0
        self.rollbacks = 0
        self.writes = 0

    def maybe_fail(self, operation: str) -> None:
        error = self.fail_on.get(operation)
        if error is not None:
            raise error


class FakeRepository:
    """Reads see committed rows plus this transaction's staged rows."""

    def __init__(self, uow: "FakeUnitOfWork") -> None:
        self._uow = uow
        self._store = uow.store

    def _users(self) -> list[User]:
        return list(self._store.users.values()) + list(self._uow.staged_users.values())

    def create_user(self, user: User) -> None:
        self._write("create_user")
        self._uow.staged_users[user.id] = user

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        self._store.maybe_fail("get_user_by_id")
        return next((u for u in self._users() if u.id == user_id), None)

    def get_user_by_email(self, email: str) -> Optional[User]:
        self._store.maybe_fail("get_user_by_email")
        return next((u for u in self._users() if u.email == email), None)

    def get_user_by_username(self, username: str) -> Optional[User]:
        self._store.maybe_fail("get_user_by_username")
        return next((u for u in self._users() if u.username == username), None)

    def create_account_confirmation(self, confirmation: AccountConfirmation) -> None:
        self._write("create_account_confirmation")
        self._uow.staged_confirmations[confirmation.confirmation_code] = confirmation

    def get_account_confirmation_by_confirmation_code(
        self, confirmation_code: UUID
    ) -> Optional[AccountConfirmation]:
        self._store.maybe_fail("get_account_confirmation_by_confirmation_code")
        return self._store.confirmations.get(confirmation_code)

    def confirm_user_account(self, user_id: UUID) -> None:
        self._write("confirm_user_account")
        self._uow.confirmed_user_ids.add(user_id)

    def _write(self, operation: str) -> None:
        if not self._uow.active:
            raise RepositoryError("Write attempted without an active transaction", operation=operation)
        self._store.maybe_fail(operation)
        self._store.writes += 1


class FakeUnitOfWork:
    """Stages writes and applies them to the store only on commit."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.active = False
        self.closed = False
        self.staged_users: dict[UUID, User] = {}
        self.staged_confirmations: dict[UUID, AccountConfirmation] = {}
        self.confirmed_user_ids: set[UUID] = set()
        self._repository: Optional[FakeRepository] = None

    def begin_transaction(self) -> None:
        if self.active or self.closed:
            raise TransactionError("Transaction already started", operation="FakeUnitOfWork.begin_transaction")
        self.store.begins += 1
        self.active = True

    def repository(self) -> FakeRepository:
        if self._repository is None:
            self._repository = FakeRepository(self)
        return self._repository

    def commit(self) -> None:
        if not self.active:
            raise TransactionError("Transaction already closed", operation="FakeUnitOfWork.commit")
        self.active, self.closed = False, True
        if self.store.commit_error is not None:
            raise self.store.commit_error
        self.store.commits += 1
        self.store.users.update(self.staged_users)
        self.store.confirmations.update(self.staged_confirmations)
        for user_id in self.confirmed_user_ids:
            user = self.store.users[user_id]
            self.store.users[user_id] = replace(user, is_account_confirmed=True)

    def rollback(self) -> None:
        if not self.active:
            raise TransactionError("Transaction already closed", operation="FakeUnitOfWork.rollback")
        self.active, self.closed = False, True
        self.store.rollbacks += 1

    def __enter__(self) -> "FakeUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.active:
            self.rollback()


class FakeCredentials:
    """Deterministic stand-in for CredentialTools."""

    def __init__(self, security_code: str = "012345") -> None:
        self._counter = itertools.count(1)
        self.security_code = security_code
        self.fail_identifier: Optional[AppError] = None

    def new_identifier(self) -> UUID:
        if self.fail_identifier is not None:
            raise self.fail_identifier
        return UUID(int=next(self._counter))

    def new_salt(self, length: int) -> bytes:
        return b"s" * length

    def hash_password(self, plaintext: str, salt: bytes) -> bytes:
        return b"hashed:" + plaintext.encode()[::-1] + salt

    def new_security_code(self) -> str:
        return self.security_code


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def unit_of_work_factory(store: InMemoryStore) -> Callable[[], FakeUnitOfWork]:
    return lambda: FakeUnitOfWork(store)


@pytest.fixture
def credentials() -> FakeCredentials:
    return FakeCredentials()


@pytest.fixture
def sender() -> Mock:
    return Mock()


@pytest.fixture
def service(
    unit_of_work_factory: Callable[[], FakeUnitOfWork],
    credentials: FakeCredentials,
    sender: Mock,
) -> RegistrationService:
    return RegistrationService(
        unit_of_work_factory=unit_of_work_factory,
        credentials=credentials,
        confirmation_sender=sender,
    )


@pytest.fixture
def new_user() -> CreateUserInput:
    return CreateUserInput(
        username="wojciech96",
        email="wojciech@example.com",
        confirm_email="wojciech@example.com",
        password="!hardPassw0rd.",
        confirm_password="!hardPassw0rd.",
    )


@pytest.fixture
def make_user() -> Iterator[Callable[..., User]]:
    """Factory for User rows with sensible defaults."""
    ids = itertools.count(1000)

    def _make(**overrides) -> User:
        values = {
            "id": UUID(int=next(ids)),
            "username": "existing1",
            "email": "existing@example.com",
            "password_hash": b"hash",
            "salt": b"salt",
        }
        values.update(overrides)
        return User(**values)

    yield _make
