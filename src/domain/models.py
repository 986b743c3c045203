"""
Domain records - Users, confirmation challenges and registration input.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

ANONYMIZED = "anonymized"


@dataclass(frozen=True)
class User:
    """Identity record. Created unconfirmed and not deleted."""

    id: UUID
    username: str
    email: str
    password_hash: bytes
    salt: bytes
    registration_date: Optional[datetime] = None
    is_account_confirmed: bool = False
    is_account_deleted: bool = False
    phone_number: Optional[str] = None

    def __repr__(self) -> str:
        # password_hash and salt stay out of logs
        return (
            f"User(id={self.id}, username={self.username!r}, email={self.email!r}, "
            f"is_account_confirmed={self.is_account_confirmed}, "
            f"is_account_deleted={self.is_account_deleted})"
        )


@dataclass(frozen=True)
class AccountConfirmation:
    """One-time confirmation challenge issued at registration."""

    user_id: UUID
    confirmation_code: UUID
    security_code: str

    def __repr__(self) -> str:
        return (
            f"AccountConfirmation(user_id={self.user_id}, "
            f"confirmation_code={self.confirmation_code})"
        )


@dataclass(frozen=True)
class CreateUserInput:
    """Registration form as submitted by the client."""

    username: str
    email: str
    confirm_email: str
    password: str
    confirm_password: str
    phone_number: Optional[str] = None

    def anonymized(self) -> "CreateUserInput":
        """Copy with both password fields redacted."""
        return replace(self, password=ANONYMIZED, confirm_password=ANONYMIZED)

    def describe(self) -> str:
        """Sanitized argument string for error context."""
        return f"new_user: {self.anonymized()}"


class ConfirmResult(str, Enum):
    """Successful outcomes of an account confirmation."""

    CONFIRMED = "account confirmed"
    ALREADY_CONFIRMED = "account already confirmed"
