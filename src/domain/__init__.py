"""
Domain layer - Pure business logic with zero framework imports.

This package contains the registration and account confirmation workflow.
It defines its own port interfaces for infrastructure abstraction; storage
and delivery live in src.adapters.
"""

from .credentials import CredentialTools
from .exceptions import (
    AppError,
    DuplicateError,
    GenerationError,
    NotFoundError,
    PasswordPolicyError,
    RepositoryError,
    TransactionError,
    ValidationError,
)
from .models import AccountConfirmation, ConfirmResult, CreateUserInput, User
from .ports import ConfirmationSender, CredentialGenerator, UnitOfWork, UserRepository
from .registration import RegistrationService

__all__ = [
    "AccountConfirmation",
    "AppError",
    "ConfirmResult",
    "ConfirmationSender",
    "CreateUserInput",
    "CredentialGenerator",
    "CredentialTools",
    "DuplicateError",
    "GenerationError",
    "NotFoundError",
    "PasswordPolicyError",
    "RegistrationService",
    "RepositoryError",
    "TransactionError",
    "UnitOfWork",
    "User",
    "UserRepository",
    "ValidationError",
]
