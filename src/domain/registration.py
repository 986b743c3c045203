"""
Registration domain service - account registration and two-factor confirmation.

Registration (one transaction, short-circuiting on the first failure):
    validate -> begin -> email taken? -> username taken? -> create user
             -> create confirmation -> commit -> deliver both codes

Confirmation:
    look up challenge -> compare security code -> load user
        deleted           -> NotFoundError
        already confirmed -> ALREADY_CONFIRMED, no write
        otherwise         -> begin -> confirm -> commit -> CONFIRMED

A missing challenge, a wrong security code and a deleted account all raise
the same NotFoundError so a caller cannot tell them apart.

Note: Every write happens inside a Unit of Work. Leaving the Unit of Work's
context while its transaction is still open rolls it back, so a failure at
any step leaves neither a User nor an AccountConfirmation row behind.
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

from .exceptions import AppError, DuplicateError, NotFoundError, ValidationError
from .models import AccountConfirmation, ConfirmResult, CreateUserInput, User
from .ports import ConfirmationSender, CredentialGenerator, UnitOfWork, UserRepository
from .validation import validate_new_user

logger = logging.getLogger(__name__)

EMAIL_IN_USE = "email already in use"
USERNAME_IN_USE = "username already in use"

# Unique constraints from migrations/001_create_user_tables.sql that guard
# the duplicate checks. Any other violation stays an internal error.
CONFLICT_MESSAGES = {
    "user_email_key": EMAIL_IN_USE,
    "user_username_key": USERNAME_IN_USE,
}


@dataclass
class RegistrationService:
    """
    Domain service for user registration and account confirmation.

    A fresh Unit of Work is obtained from unit_of_work_factory for every
    business operation and discarded afterwards.
    """

    unit_of_work_factory: Callable[[], UnitOfWork]
    credentials: CredentialGenerator
    confirmation_sender: ConfirmationSender
    salt_length: int = 16

    def register(self, new_user: CreateUserInput) -> UUID:
        """
        Register a new, unconfirmed user.

        Args:
            new_user: Registration form

        Returns:
            Id of the created user

        Raises:
            ValidationError: Malformed input (PasswordPolicyError for a weak password)
            DuplicateError: Email or username already in use
            AppError: Any internal failure (status 500)
        """
        operation = "RegistrationService.register"

        try:
            validate_new_user(new_user)
        except ValidationError as e:
            raise e.wrap(operation, new_user.describe()) from e

        try:
            with self.unit_of_work_factory() as uow:
                uow.begin_transaction()
                repository = uow.repository()
                self._ensure_not_duplicate(repository, new_user)
                user = self._create_user(repository, new_user)
                confirmation = self._create_account_confirmation(repository, user.id)
                uow.commit()
        except AppError as e:
            e = self._reclassify_unique_violation(e)
            raise e.wrap(operation, new_user.describe()) from e

        self.confirmation_sender.send_confirmation_link(user.email, confirmation.confirmation_code)
        self.confirmation_sender.send_security_code(
            user.phone_number or user.email, confirmation.security_code
        )
        logger.info("Registered user %s", user.id)
        return user.id

    def confirm(self, confirmation_code: UUID, security_code: str) -> ConfirmResult:
        """
        Confirm an account with its confirmation code and security code.

        Args:
            confirmation_code: Code from the confirmation link
            security_code: 6-digit code from the second channel

        Returns:
            CONFIRMED on the first successful call, ALREADY_CONFIRMED after that

        Raises:
            NotFoundError: Unknown code, wrong security code or deleted account
            AppError: Any internal failure (status 500)
        """
        operation = "RegistrationService.confirm"
        argument = f"confirmation_code: {confirmation_code}"

        try:
            with self.unit_of_work_factory() as uow:
                repository = uow.repository()

                confirmation = repository.get_account_confirmation_by_confirmation_code(
                    confirmation_code
                )
                if confirmation is None or not secrets.compare_digest(
                    confirmation.security_code.encode(), security_code.encode()
                ):
                    raise NotFoundError(operation=operation, argument=argument)

                user = repository.get_user_by_id(confirmation.user_id)
                if user is None or user.is_account_deleted:
                    raise NotFoundError(operation=operation, argument=argument)

                if user.is_account_confirmed:
                    return ConfirmResult.ALREADY_CONFIRMED

                uow.begin_transaction()
                repository.confirm_user_account(user.id)
                uow.commit()
        except AppError as e:
            raise e.wrap(operation, argument) from e

        logger.info("Confirmed account of user %s", user.id)
        return ConfirmResult.CONFIRMED

    def _ensure_not_duplicate(self, repository: UserRepository, new_user: CreateUserInput) -> None:
        """Email first, then username. With both taken, the email conflict wins."""
        operation = "RegistrationService._ensure_not_duplicate"
        argument = f"username: {new_user.username}, email: {new_user.email}"

        if repository.get_user_by_email(new_user.email) is not None:
            raise DuplicateError(EMAIL_IN_USE, operation=operation, argument=argument)
        if repository.get_user_by_username(new_user.username) is not None:
            raise DuplicateError(USERNAME_IN_USE, operation=operation, argument=argument)

    def _create_user(self, repository: UserRepository, new_user: CreateUserInput) -> User:
        user_id = self.credentials.new_identifier()
        salt = self.credentials.new_salt(self.salt_length)
        user = User(
            id=user_id,
            username=new_user.username,
            email=new_user.email,
            password_hash=self.credentials.hash_password(new_user.password, salt),
            salt=salt,
            phone_number=new_user.phone_number,
        )
        repository.create_user(user)
        return user

    def _create_account_confirmation(
        self, repository: UserRepository, user_id: UUID
    ) -> AccountConfirmation:
        confirmation = AccountConfirmation(
            user_id=user_id,
            confirmation_code=self.credentials.new_identifier(),
            security_code=self.credentials.new_security_code(),
        )
        repository.create_account_confirmation(confirmation)
        return confirmation

    def _reclassify_unique_violation(self, error: AppError) -> AppError:
        """
        Map a storage-level uniqueness violation onto the 409 outcome.

        Covers the race where a concurrent registration inserts the same
        email or username between our duplicate check and our insert.
        """
        constraint = error.violated_constraint
        message = CONFLICT_MESSAGES.get(constraint)
        if message is None:
            return error

        return DuplicateError(
            message,
            operation="RegistrationService._reclassify_unique_violation",
            argument=f"constraint: {constraint}",
            child_app_error=error,
            child_error=error.child_error,
        )
