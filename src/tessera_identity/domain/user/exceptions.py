"""User domain exceptions.

Custom exceptions for the user domain, used for validation
and business rule violations.
"""

from typing import Any

from tessera_identity.domain.shared.exceptions import (
    DomainException,
    ErrorCode,
    ValidationError,
)


class InvalidEmailError(ValidationError):
    """Raised when email format is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class EmailAlreadyExistsError(DomainException):
    """Email already registered."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(
            "Email already registered",
            ErrorCode.DUPLICATE_EMAIL,
            {"email": email},
        )


class UserNotFoundError(DomainException):
    """User not found."""

    def __init__(self, user_id: Any) -> None:
        self.user_id = user_id
        super().__init__(
            f"User not found: {user_id}",
            ErrorCode.USER_NOT_FOUND,
            {"user_id": str(user_id)},
        )


class InsufficientPermissionsError(DomainException):
    """Actor is not allowed to perform an action on a resource."""

    def __init__(
        self,
        action: str,
        resource: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.action = action
        self.resource = resource
        super().__init__(
            f"Insufficient permissions to {action} {resource}",
            ErrorCode.INSUFFICIENT_PERMISSIONS,
            {"action": action, "resource": resource, **(details or {})},
        )


class InvalidOperationError(DomainException):
    """Operation would break a user invariant (e.g. deactivating yourself)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, ErrorCode.INVALID_OPERATION, details)
