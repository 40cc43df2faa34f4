"""Shared domain exceptions and error codes.

This module defines the base exception hierarchy and error codes for the
identity core. All domain exceptions inherit from DomainException so the
calling layer can translate them into user-facing responses in one place.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for API clients.

    These codes are part of the public contract. Should not be changed.
    """

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    MALFORMED_CREDENTIAL = "MALFORMED_CREDENTIAL"

    # Authentication Errors
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    TOKEN_TYPE_MISMATCH = "TOKEN_TYPE_MISMATCH"
    RATE_LIMITED = "RATE_LIMITED"

    # Authorization Errors
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Not Found Errors
    USER_NOT_FOUND = "USER_NOT_FOUND"

    # Conflict Errors
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"

    # Business Rule Violations
    INVALID_OPERATION = "INVALID_OPERATION"

    # Configuration
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class DomainException(Exception):  # NOQA: N818
    """Base exception for all identity domain errors.

    Attributes
    ----------
    message
        Human-readable error message (safe for end users)
    code
        Stable error code for programmatic handling
    details
        Optional additional context (logged but not exposed to users)
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code.value!r}, "
            f"details={self.details!r})"
        )


class ValidationError(DomainException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
