"""Business rules that span more than one user.

Every check raises on failure and returns True on success, so use cases
can run them before touching any repository.
"""

from collections.abc import Iterable
from typing import Union
from uuid import UUID

from tessera_identity.domain.user.aggregates import User
from tessera_identity.domain.user.exceptions import (
    InsufficientPermissionsError,
    InvalidOperationError,
)
from tessera_identity.domain.user.value_objects import Email, UserRole, UserStatus


def _role_values(user: User) -> list[str]:
    return list(user.role_values)


class UserDomainService:
    """Hierarchy and lifecycle rules for managing users."""

    def validate_user_creation(self, to_create: User, creator: User) -> bool:
        """Check that creator may create a user with to_create's roles.

        SYSTEM_ADMIN may create any role set, ADMIN only exactly {USER}.

        Raises
        ------
        InsufficientPermissionsError
            If the creator may not create this user
        """
        if creator.is_system_admin:
            return True

        if creator.has_role(UserRole.ADMIN):
            if to_create.roles != {UserRole.USER}:
                raise InsufficientPermissionsError(
                    "create",
                    "user with elevated roles",
                    {"creator_roles": _role_values(creator)},
                )
            return True

        raise InsufficientPermissionsError(
            "create", "user", {"creator_roles": _role_values(creator)}
        )

    def can_assign_role(
        self,
        assignee: User,
        role: Union[str, UserRole],
        creator: User,
    ) -> bool:
        role = UserRole.from_string(role)
        if creator.is_system_admin:
            return True

        if creator.has_role(UserRole.ADMIN):
            if role is not UserRole.USER:
                raise InsufficientPermissionsError(
                    "assign",
                    f"role {role.value}",
                    {
                        "creator_roles": _role_values(creator),
                        "target_role": role.value,
                        "assignee_id": str(assignee.id),
                    },
                )
            return True

        raise InsufficientPermissionsError(
            "assign", "role", {"creator_roles": _role_values(creator)}
        )

    def validate_user_hierarchy(self, manager: User, target: User) -> bool:
        """Ensure lower-privilege users cannot manage higher-privilege ones.

        Raises
        ------
        InsufficientPermissionsError
            If manager may not manage target
        """
        if manager.is_system_admin:
            return True

        if manager.has_role(UserRole.ADMIN):
            if target.is_admin:
                raise InsufficientPermissionsError(
                    "manage",
                    "user with elevated privileges",
                    {
                        "manager_roles": _role_values(manager),
                        "target_roles": _role_values(target),
                    },
                )
            return True

        if manager.is_self(target):
            return True

        raise InsufficientPermissionsError(
            "manage",
            "other users",
            {"manager_id": str(manager.id), "target_id": str(target.id)},
        )

    def validate_status_transition(
        self,
        user: User,
        new_status: Union[str, UserStatus],
        manager: User,
    ) -> bool:
        """Users can never deactivate themselves."""
        new_status = UserStatus(new_status)
        if manager.is_self(user) and new_status is UserStatus.INACTIVE:
            raise InvalidOperationError(
                "Users cannot deactivate their own account",
                {"user_id": str(user.id)},
            )
        return self.validate_user_hierarchy(manager, user)

    def can_manage_password(self, manager: User, target: User) -> bool:
        if manager.is_self(target):
            return True
        return self.validate_user_hierarchy(manager, target)

    def validate_email_uniqueness(
        self,
        email: Union[str, Email],
        existing_users: Iterable[User],
        exclude_user_id: UUID | None = None,
    ) -> bool:
        """True if no other user in existing_users has this email."""
        email = email if isinstance(email, Email) else Email(email)
        return not any(
            user.email_obj == email and user.id != exclude_user_id
            for user in existing_users
        )

    def validate_profile_completeness(
        self,
        user: User,
        required_fields: Iterable[str],
    ) -> bool:
        profile = user.profile
        return all(getattr(profile, name, None) for name in required_fields)
