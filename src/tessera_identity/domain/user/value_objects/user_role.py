"""Role hierarchy: USER < ADMIN < SYSTEM_ADMIN."""

from __future__ import annotations

from enum import Enum

_LEVELS = {"user": 1, "admin": 2, "system_admin": 3}


class UserRole(str, Enum):
    """Closed set of user roles ordered by privilege."""

    USER = "user"
    ADMIN = "admin"
    SYSTEM_ADMIN = "system_admin"

    @property
    def level(self) -> int:
        return _LEVELS[self.value]

    @classmethod
    def from_string(cls, value: str | UserRole) -> UserRole:
        """Parse a role case-insensitively.

        Raises
        ------
        ValueError
            If the value names no role
        """
        if isinstance(value, UserRole):
            return value
        normalized = str(value).strip().lower()
        for role in cls:
            if role.value == normalized:
                return role
        msg = f"Invalid role: {value}"
        raise ValueError(msg)

    @classmethod
    def all(cls) -> list[UserRole]:
        """All roles from least to most privileged."""
        return sorted(cls, key=lambda role: role.level)

    def is_higher_than(self, other: UserRole) -> bool:
        return self.level > other.level

    def is_lower_than(self, other: UserRole) -> bool:
        return self.level < other.level

    def can_manage(self, target: UserRole) -> bool:
        """SYSTEM_ADMIN manages everyone, ADMIN manages USER, USER manages no one."""
        if self is UserRole.SYSTEM_ADMIN:
            return True
        if self is UserRole.ADMIN:
            return target is UserRole.USER
        return False
