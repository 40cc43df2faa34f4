"""Authentication exceptions.

These exceptions are raised by the tessera_auth package and should be
caught and handled by the application layer. Each carries a stable
ErrorCode so the calling layer can map it to a response without
string matching.
"""

from typing import Any

from tessera_identity.domain.shared.exceptions import DomainException, ErrorCode


class AuthError(DomainException):
    """Base exception for all authentication errors."""

    def __init__(
        self,
        message: str = "Authentication error",
        code: ErrorCode = ErrorCode.INVALID_CREDENTIALS,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


class TokenInvalidError(AuthError):
    """Raised when a token has a bad signature, shape or has been revoked."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, ErrorCode.TOKEN_INVALID)


class TokenExpiredError(AuthError):
    """Raised when a token is presented at or after its expiry instant."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, ErrorCode.TOKEN_EXPIRED)


class TokenTypeMismatchError(AuthError):
    """Raised when a token of one type is used for another type's operation."""

    def __init__(self, expected: str, actual: str | None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Expected a {expected} token",
            ErrorCode.TOKEN_TYPE_MISMATCH,
            {"expected": expected, "actual": actual},
        )


class TokenConfigurationError(AuthError):
    """Raised when the signing secret for a token type is not configured."""

    def __init__(self, token_type: str):
        self.token_type = token_type
        super().__init__(
            f"Signing secret for {token_type} tokens is not configured",
            ErrorCode.CONFIGURATION_ERROR,
        )


class InvalidPasswordError(AuthError):
    """Raised when a password violates the password policy.

    Only the first failing rule is reported.
    """

    def __init__(
        self,
        reason: str,
        message: str = "Password does not meet requirements",
        details: dict[str, Any] | None = None,
    ):
        self.reason = reason
        super().__init__(
            message,
            ErrorCode.INVALID_PASSWORD,
            {"reason": reason, **(details or {})},
        )


class MalformedCredentialError(AuthError):
    """Raised when a stored credential is not a structurally valid hash."""

    def __init__(self, message: str = "Stored credential is malformed"):
        super().__init__(message, ErrorCode.MALFORMED_CREDENTIAL)


class InvalidCredentialsError(AuthError):
    """Raised when email or password is incorrect, or the account is inactive.

    Deliberately does not tell "unknown email" apart from "wrong password".
    """

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, ErrorCode.INVALID_CREDENTIALS)


class PasswordResetRateLimitError(AuthError):
    """Raised when a password reset request is rate limited."""

    def __init__(
        self,
        message: str = "Too many password reset requests. Try again later.",
    ):
        super().__init__(message, ErrorCode.RATE_LIMITED)
