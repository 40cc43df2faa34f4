"""User domain manages identity, roles and account state.

This domain handles:
- User aggregate (identity, credential, roles, profile, status)
- Role hierarchy and hierarchy checks between users
- Repository interface for persistence
"""

from tessera_identity.domain.user.aggregates import User
from tessera_identity.domain.user.exceptions import (
    EmailAlreadyExistsError,
    InsufficientPermissionsError,
    InvalidEmailError,
    InvalidOperationError,
    UserNotFoundError,
)
from tessera_identity.domain.user.repositories import (
    UserPage,
    UserQuery,
    UserRepository,
)
from tessera_identity.domain.user.services import UserDomainService
from tessera_identity.domain.user.value_objects import (
    Credential,
    Email,
    UserProfile,
    UserRole,
    UserStatus,
)

__all__ = [
    "Credential",
    "Email",
    "EmailAlreadyExistsError",
    "InsufficientPermissionsError",
    "InvalidEmailError",
    "InvalidOperationError",
    "User",
    "UserDomainService",
    "UserNotFoundError",
    "UserPage",
    "UserProfile",
    "UserQuery",
    "UserRepository",
    "UserRole",
    "UserStatus",
]
