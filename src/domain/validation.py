"""
Registration input validation - pure rules, no I/O.

Rules are checked in a fixed order (username, emails, passwords, phone
number) and the first failure is raised. Format, length and match problems
are ValidationError (400); a password without both a digit and a symbol is
PasswordPolicyError (403).
"""

import re
import unicodedata
from typing import Optional

from .exceptions import PasswordPolicyError, ValidationError
from .models import CreateUserInput

USERNAME_MIN_LENGTH = 5
USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 8
# Matches the email column of the "user" table
EMAIL_MAX_LENGTH = 320

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_NUMBER_PATTERN = re.compile(r"\+?[0-9]{7,15}")


def validate_new_user(new_user: CreateUserInput) -> None:
    """Validate a registration form, raising on the first broken rule."""
    try:
        validate_username(new_user.username)
        validate_emails(new_user.email, new_user.confirm_email)
        validate_passwords(new_user.password, new_user.confirm_password)
        validate_phone_number(new_user.phone_number)
    except ValidationError as e:
        raise e.wrap("validate_new_user", new_user.describe()) from e


def validate_username(username: str) -> None:
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must contain between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters",
            operation="validate_username",
            argument=f"username: {username}",
        )


def validate_emails(email: str, confirm_email: str) -> None:
    argument = f"email: {email}, confirm_email: {confirm_email}"
    if email != confirm_email:
        raise ValidationError(
            "Provided emails do not match",
            operation="validate_emails",
            argument=argument,
        )
    if not is_valid_email(email):
        raise ValidationError(
            "Invalid email format",
            operation="validate_emails",
            argument=argument,
        )


def is_valid_email(email: str) -> bool:
    return len(email) <= EMAIL_MAX_LENGTH and EMAIL_PATTERN.fullmatch(email) is not None


def validate_passwords(password: str, confirm_password: str) -> None:
    # Passwords never appear in the error argument
    if password != confirm_password:
        raise ValidationError(
            "Provided passwords are not the same",
            operation="validate_passwords",
        )
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Password must contain at least {PASSWORD_MIN_LENGTH} characters",
            operation="validate_passwords",
        )
    if not has_digit_and_symbol(password):
        raise PasswordPolicyError(operation="validate_passwords")


def has_digit_and_symbol(password: str) -> bool:
    """True when password holds at least one decimal digit and one punctuation/symbol character."""
    has_digit = has_symbol = False
    for char in password:
        if char.isdecimal():
            has_digit = True
        elif unicodedata.category(char)[0] in ("P", "S"):
            has_symbol = True
        if has_digit and has_symbol:
            return True
    return False


def validate_phone_number(phone_number: Optional[str]) -> None:
    if phone_number is None:
        return
    if PHONE_NUMBER_PATTERN.fullmatch(phone_number) is None:
        raise ValidationError(
            "Invalid phone number format",
            operation="validate_phone_number",
            argument=f"phone_number: {phone_number}",
        )
