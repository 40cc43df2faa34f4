"""Application commands for identity management."""

from tessera_identity.application.commands.assign_role_command import AssignRoleCommand
from tessera_identity.application.commands.create_user_command import CreateUserCommand
from tessera_identity.application.commands.update_user_profile_command import (
    UpdateUserProfileCommand,
)
from tessera_identity.application.commands.update_user_status_command import (
    UpdateUserStatusCommand,
)

__all__ = [
    "AssignRoleCommand",
    "CreateUserCommand",
    "UpdateUserProfileCommand",
    "UpdateUserStatusCommand",
]
