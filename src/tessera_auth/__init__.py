"""Tessera Auth - Generic authentication infrastructure.

This package provides authentication infrastructure that is independent
of any specific application domain. It handles:
- Password hashing (bcrypt)
- Password policy enforcement and strength scoring
- JWT token creation and verification, one secret per token type
- Refresh token revocation (with pluggable persistence)

Architecture:
    tessera_auth/
    ├── services/           # Pure logic (hashing, policy, JWT, refresh lifecycle)
    ├── repositories/       # Abstract interfaces
    ├── persistence/        # Implementations by technology
    │   └── sqlalchemy/     # SQLAlchemy implementation
    ├── factories.py        # Build services from Settings
    ├── schemas.py          # Data classes
    └── exceptions.py       # Auth exceptions

Usage:
    # Import core services and interfaces
    from tessera_auth import PasswordHashingService, JWTService

    # Import SQLAlchemy implementation
    from tessera_auth.persistence.sqlalchemy import (
        RefreshTokenRepositorySQLAlchemy,
        AuthBase,
    )
"""

from tessera_auth.exceptions import (
    AuthError,
    InvalidCredentialsError,
    InvalidPasswordError,
    MalformedCredentialError,
    PasswordResetRateLimitError,
    TokenConfigurationError,
    TokenExpiredError,
    TokenInvalidError,
    TokenTypeMismatchError,
)
from tessera_auth.repositories import (
    PasswordResetTokenData,
    PasswordResetTokenRepository,
    RefreshTokenData,
    RefreshTokenRepository,
)
from tessera_auth.schemas import (
    HashInfo,
    SessionInfo,
    TokenPair,
    TokenPayload,
    TokenSubject,
    TokenType,
)
from tessera_auth.services import (
    JWTService,
    PasswordHashingService,
    PasswordPolicy,
    PasswordPolicyService,
    PolicyOk,
    PolicyResult,
    PolicyViolation,
    RefreshTokenService,
)

__all__ = [
    # Services
    "JWTService",
    "PasswordHashingService",
    "PasswordPolicy",
    "PasswordPolicyService",
    "PolicyOk",
    "PolicyResult",
    "PolicyViolation",
    "RefreshTokenService",
    # Repositories (interfaces)
    "PasswordResetTokenData",
    "PasswordResetTokenRepository",
    "RefreshTokenData",
    "RefreshTokenRepository",
    # Schemas
    "HashInfo",
    "SessionInfo",
    "TokenPair",
    "TokenPayload",
    "TokenSubject",
    "TokenType",
    # Exceptions
    "AuthError",
    "InvalidCredentialsError",
    "InvalidPasswordError",
    "MalformedCredentialError",
    "PasswordResetRateLimitError",
    "TokenConfigurationError",
    "TokenExpiredError",
    "TokenInvalidError",
    "TokenTypeMismatchError",
]
