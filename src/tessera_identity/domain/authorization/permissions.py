"""Static role to permission mapping.

Permissions are ``resource:action`` strings, optionally scoped with a
third ``:own`` segment. ``resource:*`` grants every action on a resource.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Union

from tessera_identity.domain.user.value_objects import UserRole


class Resource(str, Enum):
    USER = "user"
    PROFILE = "profile"
    AUDIT = "audit"
    SYSTEM = "system"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"


ROLE_PERMISSIONS: dict[UserRole, frozenset[str]] = {
    UserRole.SYSTEM_ADMIN: frozenset(
        {"user:*", "profile:*", "audit:*", "system:*"},
    ),
    UserRole.ADMIN: frozenset(
        {
            "user:create",
            "user:read",
            "user:update",
            "user:delete",
            "profile:read",
            "profile:update",
            "profile:delete",
            "audit:read",
        },
    ),
    UserRole.USER: frozenset(
        {"profile:read:own", "profile:update:own", "profile:delete:own"},
    ),
}


def effective_permissions(role: Union[str, UserRole]) -> frozenset[str]:
    return ROLE_PERMISSIONS[UserRole.from_string(role)]


def effective_permissions_for(roles: Iterable[Union[str, UserRole]]) -> frozenset[str]:
    """Union of the permissions of every role in the set."""
    result: frozenset[str] = frozenset()
    for role in roles:
        result |= effective_permissions(role)
    return result


def has_permission(permissions: Iterable[str], required: str) -> bool:
    """Check ``required`` against a permission set, honouring wildcards.

    A scoped grant such as ``profile:read:own`` only satisfies a request
    that carries the same scope.
    """
    granted = set(permissions)
    if required in granted:
        return True

    resource = required.split(":", 1)[0]
    return f"{resource}:*" in granted
