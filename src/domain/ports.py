"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from types import TracebackType
from typing import Optional, Protocol
from uuid import UUID

from .models import AccountConfirmation, User


class UserRepository(Protocol):
    """
    Port interface for user and confirmation persistence.

    Lookups return None for "no such row". Every other failure raises
    RepositoryError. Writes must run inside the owning Unit of Work's
    active transaction.
    """

    def create_user(self, user: User) -> None: ...

    def get_user_by_id(self, user_id: UUID) -> Optional[User]: ...

    def get_user_by_email(self, email: str) -> Optional[User]: ...

    def get_user_by_username(self, username: str) -> Optional[User]: ...

    def create_account_confirmation(self, confirmation: AccountConfirmation) -> None: ...

    def get_account_confirmation_by_confirmation_code(
        self, confirmation_code: UUID
    ) -> Optional[AccountConfirmation]: ...

    def confirm_user_account(self, user_id: UUID) -> None:
        """
        Set is_account_confirmed for the user unconditionally.

        Callers check the current state first.
        """
        ...


class UnitOfWork(Protocol):
    """
    Port interface for one transaction's lifetime.

    States: Idle -> Active (begin_transaction) -> Closed (commit/rollback).
    Closed is terminal. Leaving the context manager while Active rolls back.
    """

    def begin_transaction(self) -> None: ...

    def repository(self) -> UserRepository: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def __enter__(self) -> "UnitOfWork": ...

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None: ...


class CredentialGenerator(Protocol):
    """Port interface for identifiers, salts, codes and password hashes."""

    def new_identifier(self) -> UUID: ...

    def new_salt(self, length: int) -> bytes: ...

    def hash_password(self, plaintext: str, salt: bytes) -> bytes: ...

    def new_security_code(self) -> str: ...


class ConfirmationSender(Protocol):
    """Port interface for delivering the two confirmation factors."""

    def send_confirmation_link(self, email: str, confirmation_code: UUID) -> None:
        """Deliver the confirmation code (primary channel)."""
        ...

    def send_security_code(self, recipient: str, security_code: str) -> None:
        """Deliver the 6-digit security code (secondary channel)."""
        ...
