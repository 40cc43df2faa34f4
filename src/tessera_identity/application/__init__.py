"""Identity use cases built on the domain and tessera_auth."""

from tessera_identity.application.commands import (
    AssignRoleCommand,
    CreateUserCommand,
    UpdateUserProfileCommand,
    UpdateUserStatusCommand,
)
from tessera_identity.application.ports import NotificationService
from tessera_identity.application.services import (
    AuthenticationService,
    AuthResult,
    PasswordResetService,
)

__all__ = [
    "AssignRoleCommand",
    "AuthResult",
    "AuthenticationService",
    "CreateUserCommand",
    "NotificationService",
    "PasswordResetService",
    "UpdateUserProfileCommand",
    "UpdateUserStatusCommand",
]
