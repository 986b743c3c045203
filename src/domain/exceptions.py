"""
Domain exceptions - Causal, classifiable error records.

Every layer raises an AppError subclass. When a layer catches an error from
the layer below, it wraps it with its own call-site context instead of
discarding it, producing a chain from the outermost context to the root cause:

    RegistrationService.register  (DuplicateError, 409)
      -> RegistrationService._reclassify_unique_violation
        -> PostgresUserRepository.create_user  (RepositoryError, child_error: UniqueViolation)

The status_code is a coarse classification (400, 403, 404, 409, 500) that the
HTTP boundary maps onto a response. The domain itself knows nothing about HTTP.
"""

from collections.abc import Iterator
from typing import Optional


class AppError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    default_message: str = "internal error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        operation: str = "",
        argument: Optional[str] = None,
        child_app_error: Optional["AppError"] = None,
        child_error: Optional[BaseException] = None,
        status_code: Optional[int] = None,
        loggable: Optional[bool] = None,
        violated_constraint: Optional[str] = None,
    ) -> None:
        self.message = message if message is not None else self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.operation = operation
        self.argument = argument
        self.child_app_error = child_app_error
        self.child_error = child_error
        # Set by storage adapters when a unique constraint rejected a write
        self.violated_constraint = violated_constraint
        # Only internal failures are worth a server-side log entry
        self.loggable = loggable if loggable is not None else self.status_code >= 500
        super().__init__(self.message)

    def wrap(self, operation: str, argument: Optional[str] = None) -> "AppError":
        """
        Return a new outer error of the same class pointing at this one.

        Status, message and the underlying technical cause are carried over,
        so callers can still catch by class at any level of the chain.
        """
        return type(self)(
            self.message,
            operation=operation,
            argument=argument,
            child_app_error=self,
            child_error=self.child_error,
            status_code=self.status_code,
            loggable=self.loggable,
            violated_constraint=self.violated_constraint,
        )

    def chain(self) -> Iterator["AppError"]:
        """Iterate the causal chain, outermost error first."""
        node: Optional[AppError] = self
        while node is not None:
            yield node
            node = node.child_app_error

    @property
    def root(self) -> "AppError":
        """Innermost AppError of the chain."""
        *_, last = self.chain()
        return last

    def describe(self) -> list[str]:
        """Render one log line per chain node."""
        lines = []
        for depth, node in enumerate(self.chain()):
            line = f"{'  ' * depth}[{node.status_code}] {node.operation or '?'}: {node.message}"
            if node.argument is not None:
                line += f" ({node.argument})"
            lines.append(line)
        if self.child_error is not None:
            lines.append(f"caused by {type(self.child_error).__name__}: {self.child_error}")
        return lines

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status_code={self.status_code}, "
            f"message={self.message!r}, operation={self.operation!r})"
        )


class ValidationError(AppError):
    """Malformed input. No side effects, safe to report verbatim."""

    status_code = 400
    default_message = "invalid input"


class PasswordPolicyError(ValidationError):
    """Password lacks a required digit or symbol."""

    status_code = 403
    default_message = "Password must contain at least one digit and one special character"


class NotFoundError(AppError):
    """Resource absent or credentials did not match. Deliberately indistinguishable."""

    status_code = 404
    default_message = "content not found"


class DuplicateError(AppError):
    """Uniqueness conflict on username or email."""

    status_code = 409
    default_message = "already in use"


class TransactionError(AppError):
    """Begin, commit or rollback failure."""

    default_message = "transaction error"


class GenerationError(AppError):
    """Entropy or identifier generation failure."""

    default_message = "generation error"


class RepositoryError(AppError):
    """Storage I/O or constraint failure."""

    default_message = "database error"
