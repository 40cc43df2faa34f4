"""Authentication services.

Provides password hashing, password policy, JWT token management and
the refresh token lifecycle.
"""

from tessera_auth.services.jwt_service import JWTService
from tessera_auth.services.password_policy import (
    PasswordPolicy,
    PasswordPolicyService,
    PolicyOk,
    PolicyResult,
    PolicyViolation,
)
from tessera_auth.services.password_service import PasswordHashingService
from tessera_auth.services.refresh_token_service import RefreshTokenService, hash_token

__all__ = [
    "JWTService",
    "PasswordHashingService",
    "PasswordPolicy",
    "PasswordPolicyService",
    "PolicyOk",
    "PolicyResult",
    "PolicyViolation",
    "RefreshTokenService",
    "hash_token",
]
